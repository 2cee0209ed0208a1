import copy
import logging
from enum import Enum, auto
from types import MappingProxyType

from .exceptions import SchemaError


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()
    NETWORK       = auto()  # it's an alias for BIG_ENDIAN in practice


class FieldDescriptor(object):
    """Wrapper around field access of a Header related class.

    The field instances live into the __dict__ of the header instance, the
    class only keeps the prototypes into its _meta."""

    def __init__(self, field_name: str):
        self.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return type._meta.prototypes[self.name]

        return instance.__dict__[self.name]

    def __set__(self, instance, value):
        logger.debug("__set__ from %s for field named '%s'", instance.__class__.__name__, self.name)
        data = instance.__dict__
        field = data[self.name]

        # a field of the same type is copied, it could belong to another header
        if isinstance(value, field.__class__):
            value = value.create(father=instance)
            value.name = self.name
            data[self.name] = value
        # otherwise delegate to the field
        else:
            field.value = value


class AliasDescriptor(object):
    """Access a field using an alternate name."""

    def __init__(self, canonical: str):
        self.canonical = canonical

    def __get__(self, instance, type=None):
        if instance is None:
            return getattr(type, self.canonical)

        return getattr(instance, self.canonical)

    def __set__(self, instance, value):
        setattr(instance, self.canonical, value)


class FieldBase(object):

    def contribute_to_header(self, cls, name):
        cls._meta.add_field(name, self)
        setattr(cls, name, FieldDescriptor(name))

    def create(self, father):
        # the old father is not copied along with the field
        old_father = getattr(self, 'father', None)
        memo = {id(old_father): father} if old_father is not None else {}
        instance = copy.deepcopy(self, memo)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the header: the ordered names of
    the fields, their prototypes and the aliases."""

    def __init__(self):
        self.fields = []
        self.prototypes = {}
        self.aliases = {}
        self.body = None
        self.frozen = False

    def add_field(self, name, field):
        if self.frozen:
            raise SchemaError(f"cannot register field '{name}': the schema is frozen")

        if getattr(field, 'is_body', False):
            if self.body is not None and self.body != name:
                raise SchemaError(f"'{name}' cannot be the body, '{self.body}' already is")
            self.body = name

        field.name = name
        if name not in self.fields:  # a subclass can redeclare a field keeping its position
            self.fields.append(name)
        self.prototypes[name] = field

    def add_alias(self, alias, canonical):
        if self.frozen:
            raise SchemaError(f"cannot register alias '{alias}': the schema is frozen")
        if canonical not in self.prototypes:
            raise SchemaError(f"alias '{alias}' refers to the unknown field '{canonical}'")
        if alias in self.prototypes:
            raise SchemaError(f"alias '{alias}' shadows a field with the same name")

        self.aliases[alias] = canonical

    def freeze(self):
        self.fields = tuple(self.fields)
        self.prototypes = MappingProxyType(self.prototypes)
        self.aliases = MappingProxyType(self.aliases)
        self.frozen = True


class MetaHeader(type):

    def __new__(cls, names, bases, attrs):
        '''All of this is a big hack, maybe too inspired by how Django does a similar thing!'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)
        options = attrs.pop('Meta', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaHeader, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaHeader)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                new_cls._meta.add_field(obj_name, parent._meta.prototypes[obj_name])
            for alias, canonical in parent._meta.aliases.items():
                new_cls._meta.add_alias(alias, canonical)

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        aliases = getattr(options, 'aliases', {})
        for alias, canonical in aliases.items():
            logger.debug('alias \'%s\' -> \'%s\' for %s' % (alias, canonical, names))
            new_cls._meta.add_alias(alias, canonical)
            setattr(new_cls, alias, AliasDescriptor(canonical))

        new_cls._meta.freeze()

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_header'):
            logger.debug('contribute_to_header() found for field \'%s\'' % name)
            value.contribute_to_header(cls, name)
        else:
            setattr(cls, name, value)

    def register_field(cls, name, field):
        '''Append a field to the schema; it works only while the class is being built.'''
        cls.add_to_class(name, field)
