class FitbitUsageError(Exception):
    pass


class ParseError(FitbitUsageError):
    """A source, or a value in one of its columns, does not have the expected format."""

    def __init__(self, source: str, column, message: str):
        self.source = source
        self.column = column
        if column is None:
            super().__init__(f"{source}: {message}")
        else:
            super().__init__(f"{source}: column {column!r}: {message}")


class MissingDataError(FitbitUsageError):
    """A statistic was requested over zero eligible observations."""

    def __init__(self, user_id: int, column: str):
        self.user_id = user_id
        self.column = column
        super().__init__(f"no data for {column!r} (user {user_id})")


class ConfigurationError(FitbitUsageError):
    pass
