class SecretbaseError(Exception):
    """Base error for everything a command reports to the user."""


class ConfigError(SecretbaseError):
    """Missing settings or an unreachable database."""


class NotFoundError(SecretbaseError):
    pass


class ProjectNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Project '{name}' does not exist.")
        self.name = name


class EnvironmentNotFoundError(NotFoundError):
    def __init__(self, project: str, environment: str):
        super().__init__(f"No {environment} environment found for project '{project}'.")
        self.project = project
        self.environment = environment


class ProjectExistsError(SecretbaseError):
    def __init__(self, name: str):
        super().__init__(f"A project with the name '{name}' already exists.")
        self.name = name


class UserExistsError(SecretbaseError):
    def __init__(self, email: str):
        super().__init__(f"A user with the email '{email}' already exists.")
        self.email = email


class MalformedSecretError(SecretbaseError):
    """A literal secret that is not in KEY=VALUE form."""


class EnvFileError(SecretbaseError):
    """An env file that cannot be read or decoded."""

    def __init__(self, path: str, reason):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
