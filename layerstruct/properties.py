import logging


logger = logging.getLogger(__name__)


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Header):
            length = fields.Int8()
            data = fields.StringField(Dependency('.length'))

    and have the (internal) length of the string contained in the field named 'data'
    strictly connected to the field named 'length'.

    The relation is defined in one direction (usually for unpacking) and
    it's reversed during the packing phase: the header rewrites the source
    field with the current size of the dependent one before encoding.

    The expression is the name of a field at the same level, the leading dot
    is optional ('.length' and 'length' are the same thing). A ratio can be
    indicated when the source counts in units bigger than one byte.
    '''
    def __init__(self, expression, ratio=1):
        self.expression = expression
        self.ratio = ratio

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    @property
    def field_name(self) -> str:
        return self.expression.lstrip('.')

    def resolve_field(self, instance):
        '''Return the field the expression refers to, looking into the father of the instance.'''
        father = instance.father
        if father is None:
            raise AttributeError(f"cannot resolve '{self.expression}' for a field without father")

        field = getattr(father, self.field_name)
        logger.debug(' resolved \'%s\' as field %s' % (self.expression, field.__class__.__name__))

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self.resolve_field(instance).value

        return int(value) * self.ratio

    def resolve_and_set(self, instance, value):
        '''Write back into the source field the value (i.e. the size of the instance).'''
        if value % self.ratio:
            raise ValueError(f"{value} is not a multiple of {self.ratio}")

        self.resolve_field(instance).value = value // self.ratio


class PropertyDescriptor(object):
    """This the glue for dependency management"""

    def __init__(self, name: str, _type):
        self.name = name
        self.type = _type

    @property
    def cache_name(self):
        return f'_{self.name}_cache'

    def __get__(self, instance, owner):
        if instance is None:
            return self

        data = instance.__dict__
        if self.name not in data:
            raise AttributeError(f"no '{self.name}' here!")

        value = data[self.name]

        if isinstance(value, Dependency):
            # cache the value when there is no father
            if instance.father is None:
                return data.get(self.cache_name, 0)

            return value.resolve(instance)

        return value

    def __set__(self, instance, value):
        if not isinstance(value, (self.type, Dependency)):
            raise ValueError(f"A property must be of type {self.type} or a Dependency")

        data = instance.__dict__

        # the first time we add without thinking much
        if self.name not in data:
            data[self.name] = value
            return

        # this is the old stored value
        attribute = data[self.name]

        if not isinstance(attribute, Dependency) or isinstance(value, Dependency):
            data[self.name] = value
            return

        if instance.father is None:
            data[self.cache_name] = value
            return

        attribute.resolve_and_set(instance, value)
