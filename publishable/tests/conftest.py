from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm.session import Session, sessionmaker

# Importing the models runs their @publishable bindings
from .models import Base

# Publishable models are stored in an in-memory SQLite database
engine = create_engine("sqlite://")
SessionFactory = sessionmaker(bind=engine)


@pytest.fixture()
def session() -> Iterator[Session]:
    # Every test starts with empty album, issue, post... tables
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    with SessionFactory() as session:
        yield session
