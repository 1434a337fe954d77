class PublishableError(Exception):
    pass


class ConfigurationError(PublishableError):
    """
    Raised at bind time when a model can't be made publishable.
    """
