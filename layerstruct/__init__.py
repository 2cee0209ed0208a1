"""
# Layerstruct: protocol headers for humans.

A protocol header is a binary record where each field has a name, a width
and a default: the order in which the fields are declared is the order
they have on the wire.

Two basic main operations are defined for a header and its fields:

 1. unpack(): reading the binary data and build a high-level representation
    of that. Each field knows how many bytes it needs, possibly asking another
    field of the same header (a Dependency), and the body takes whatever
    remains.

 2. pack(): encode the high-level representation into binary data. The fields
    other fields depend on (like lengths) are rewritten before encoding, so
    the result is always consistent.

to these we add the dispatch: a BindingRegistry knows which header type is
contained in the body of another one, looking at a discriminator field
(like the ethertype of an Ethernet frame), and can dissect a whole stack.
"""
from .core import Header, make_header
from .meta import Endianess
from .properties import Dependency
from .registry import BindingRegistry, Binding, registry
from .exceptions import (
    LayerStructException,
    FormatError,
    EncodeError,
    ParseError,
    SchemaError,
    RegistryError,
)
