# errors.py
# Errors raised while rebuilding and committing an edited node


class NodeEditError(Exception):
    """Base for the recoverable errors of a node commit."""


class ParseError(NodeEditError):
    """The stored document text is not valid JSON."""

    def __init__(self, msg, lineno=None, colno=None):
        if lineno is not None:
            msg = f"{msg} (line {lineno}, col {colno})"
        super().__init__(msg)
        self.lineno = lineno
        self.colno = colno


class CoercionError(NodeEditError):
    """A field's raw input cannot be turned into its row's type."""

    def __init__(self, msg, key=None, row_type=None):
        super().__init__(msg)
        self.key = key
        self.row_type = row_type


class PathError(NodeEditError, TypeError):
    """A path cannot be written because it runs through a scalar."""
