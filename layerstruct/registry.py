"""
Registry of the header types and of the bindings between them.

A binding tells that when the field of an outer header (the discriminator)
has a given value, the body of that header must be interpreted as another
header type

    registry.bind(Eth, 'ethertype', 0x0806, ARP)

Not finding a binding is not an error: the body simply remains raw bytes.
"""
import logging
from collections import namedtuple
from typing import Dict, List, Optional, Tuple, Type

from .core import Header
from .exceptions import ParseError, RegistryError, SchemaError


logger = logging.getLogger(__name__)


Binding = namedtuple('Binding', ['outer', 'field', 'value', 'inner'])


class BindingRegistry(object):
    '''Table of (outer header, discriminator field, value) -> inner header.

    It's meant to be populated at startup and then only read: after freeze()
    any attempt to modify it raises RegistryError.'''

    def __init__(self):
        self._bindings: Dict[Tuple[Type[Header], str, int], Type[Header]] = {}
        self._headers: Dict[str, Type[Header]] = {}
        self._frozen = False

    def __repr__(self):
        return f'<{self.__class__.__name__}(headers={len(self._headers)}, bindings={len(self._bindings)})>'

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        self._frozen = True

    def _check_not_frozen(self):
        if self._frozen:
            raise RegistryError('the registry is frozen and cannot be modified')

    def add_header(self, header_cls: Type[Header]):
        self._check_not_frozen()
        logger.debug('adding header \'%s\'' % header_cls.__name__)
        self._headers[header_cls.__name__] = header_cls

        return header_cls

    def get_header(self, name: str) -> Type[Header]:
        return self._headers[name]

    @property
    def headers(self) -> List[str]:
        return list(self._headers)

    def bind(self, outer: Type[Header], field: str, value: int, inner: Type[Header]):
        '''Register a binding, replacing the one with the same key if any.'''
        self._check_not_frozen()

        canonical = outer.canonical_name(field)
        if canonical is None:
            raise SchemaError(f"{outer.__name__} has no field named '{field}'")

        key = (outer, canonical, int(value))
        if key in self._bindings:
            logger.debug('replacing binding %s.%s=0x%x' % (outer.__name__, canonical, value))
        self._bindings[key] = inner

    def bind_header(self, outer: Type[Header], inner: Type[Header], **discriminators):
        for field, value in discriminators.items():
            self.bind(outer, field, value, inner)

    def resolve(self, outer: Type[Header], field: str, value) -> Optional[Type[Header]]:
        canonical = outer.canonical_name(field)
        try:
            return self._bindings.get((outer, canonical, int(value)))
        except (TypeError, ValueError):
            return None

    def get_bindings(self, outer: Type[Header]) -> List[Binding]:
        return [Binding(*key, inner) for key, inner in self._bindings.items() if key[0] is outer]

    def bindings_for(self, outer: Type[Header], inner: Type[Header]) -> List[Binding]:
        return [_ for _ in self.get_bindings(outer) if _.inner is inner]

    def stack(self, outer: Header, inner: Header) -> Header:
        '''Put the inner header into the body of the outer one, setting the
        discriminator accordingly. It returns the outer header.'''
        bindings = self.bindings_for(outer.__class__, inner.__class__)
        if not bindings:
            raise RegistryError(f'{inner.__class__.__name__} is not bound to {outer.__class__.__name__}')
        if outer.get_body() is None:
            raise RegistryError(f'{outer.__class__.__name__} has no body')

        binding = bindings[0]
        setattr(outer, binding.field, binding.value)
        setattr(outer, outer._meta.body, inner)

        return outer

    def _discriminators(self, outer: Type[Header]) -> List[str]:
        fields = []
        for binding in self.get_bindings(outer):
            if binding.field not in fields:
                fields.append(binding.field)

        return fields

    def decode_body(self, header: Header) -> Header:
        '''Resolve the body of an already decoded header, recursively.'''
        body = header.get_body()
        if body is None or body.is_nested:
            return header

        for field_name in self._discriminators(header.__class__):
            discriminator = getattr(header, field_name).value
            inner = self.resolve(header.__class__, field_name, discriminator)
            if inner is None:
                continue

            logger.debug('%s.%s=0x%x resolved as %s' % (
                header.__class__.__name__, field_name, discriminator, inner.__name__))
            nested = inner()
            try:
                consumed = nested.unpack(body.value)
                self.decode_body(nested)
            except ParseError as e:
                e.chain.append(header._meta.body)
                raise

            # bytes after the inner header (like the padding of a frame) would
            # be lost, so the body stays raw
            if consumed != len(body.value):
                logger.warning('%s leaves %d bytes of the body of %s undecoded, keeping it raw' % (
                    inner.__name__, len(body.value) - consumed, header.__class__.__name__))
                break

            body.value = nested
            break
        else:
            logger.debug('no binding for the body of %s' % header.__class__.__name__)

        return header

    def dissect(self, header_cls: Type[Header], data) -> Header:
        '''Decode data as header_cls and follow the bindings to decode the bodies.'''
        return self.decode_body(header_cls(data))


registry = BindingRegistry()
