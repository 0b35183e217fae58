"""Ordered, unique-keyed protocol parameters.

A L{ParameterList} is the storage behind a
C{L{Message<openid_message.message.Message>}} and behind the private
parameter set of every extension.
"""
from . import kvform

__all__ = ['Parameter', 'ParameterList']


class Parameter(object):
    """A single key/value pair of a protocol message."""

    def __init__(self, key, value):
        self.key = key
        self.value = value

    def isValid(self):
        """Can this parameter be sent in both wire encodings?"""
        return kvform.checkPair(self.key, self.value) is None

    def __eq__(self, other):
        return (type(self) == type(other)
                and (self.key, self.value) == (other.key, other.value))

    def __ne__(self, other):
        return not (self == other)

    def __hash__(self):
        return hash((self.key, self.value))

    def __repr__(self):
        return '<%s %r:%r>' % (self.__class__.__name__, self.key, self.value)


class ParameterList(object):
    """Parameters in insertion order, at most one per key.

    Setting a key that is already present replaces its value and keeps
    its position.
    """

    def __init__(self, parameters=()):
        self._parameters = {}
        for parameter in parameters:
            self.set(parameter)

    @classmethod
    def fromPairs(cls, pairs):
        """Build a list from a sequence of C{(key, value)} pairs.
        Later duplicates replace earlier ones.

        @type pairs: Iterable[Tuple[str, str]]
        """
        return cls(Parameter(key, value) for key, value in pairs)

    @classmethod
    def fromMapping(cls, mapping):
        """@type mapping: Mapping[str, str]"""
        return cls.fromPairs(mapping.items())

    @classmethod
    def fromKVForm(cls, kvform_string, strict=False):
        """Parse a key-value form document."""
        return cls.fromPairs(kvform.kvToSeq(kvform_string, strict=strict))

    def set(self, parameter):
        self._parameters[parameter.key] = parameter

    def getParameter(self, key):
        return self._parameters.get(key)

    def getParameterValue(self, key):
        parameter = self._parameters.get(key)
        if parameter is None:
            return None
        return parameter.value

    def hasParameter(self, key):
        return key in self._parameters

    def removeParameters(self, key):
        self._parameters.pop(key, None)

    def getParameters(self):
        """@rtype: List[Parameter]"""
        return list(self._parameters.values())

    def toPairs(self):
        return [(p.key, p.value) for p in self._parameters.values()]

    def __iter__(self):
        return iter(self.getParameters())

    def __len__(self):
        return len(self._parameters)

    def __contains__(self, key):
        return self.hasParameter(key)

    def __eq__(self, other):
        return type(self) == type(other) and self.toPairs() == other.toPairs()

    def __ne__(self, other):
        return not (self == other)

    def __repr__(self):
        return '<%s %r>' % (self.__class__.__name__, self.toPairs())
