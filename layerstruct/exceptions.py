class LayerStructException(Exception):
    '''Base class to extend in order to throw exception in layerstruct.

    Other than the message it takes an optional argument that represents
    the chain of the fields that caused the exception (innermost first).
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(message)

    @property
    def path(self):
        return '.'.join(self.chain[::-1])


class FormatError(LayerStructException, ValueError):
    '''The human readable representation of a value is malformed.'''
    pass


class EncodeError(LayerStructException, ValueError):
    '''The value is not representable with the declared width.'''
    pass


class ParseError(LayerStructException):
    pass


class SchemaError(LayerStructException):
    pass


class RegistryError(LayerStructException):
    '''This is raised trying to modify a registry already frozen.'''
    pass
