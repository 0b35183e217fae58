"""Interfaces for OpenID extensions and the registry of extension
factories.

An extension owns a private set of parameters inside a
C{L{Message<openid_message.message.Message>}}. The message stores them
under a per-message alias and hands them back, with the alias removed,
to the factory registered for the extension's type URI.
"""
import logging
import threading

from .parameter import ParameterList

__all__ = ['MessageExtension', 'MessageExtensionFactory', 'ExtensionRegistry']


_LOGGER = logging.getLogger(__name__)


class MessageExtension(object):
    """An interface for OpenID extensions.

    @cvar type_uri: The URI that identifies the extension.
    """
    type_uri = None

    def getExtensionArgs(self):
        """Get the string arguments that should be added to an OpenID
        message for this extension, without any alias prefix. Arguments
        with a C{None} value are left out.

        @rtype: Dict[str, Optional[str]]
        """
        raise NotImplementedError

    def getParameters(self):
        """@rtype: L{ParameterList}"""
        args = self.getExtensionArgs()
        return ParameterList.fromPairs((name, value) for name, value in args.items() if value is not None)

    def toMessage(self, message=None):
        """Add the parameters of this extension to the provided message,
        or create a new message containing only those parameters.

        @returns: The message with the extension parameters added
        """
        if message is None:
            from openid_message.message import Message
            message = Message()

        message.addExtension(self)
        return message


class MessageExtensionFactory(object):
    """Builds L{MessageExtension} objects from the parameters a message
    holds for C{type_uri}.

    Factories are registered by class and must be constructible
    without arguments.
    """
    type_uri = None

    def getExtension(self, parameters, is_request):
        """
        @param parameters: The extension parameters, alias removed
        @type parameters: L{ParameterList}

        @param is_request: Whether the enclosing message is a
            C{checkid_*} request
        @type is_request: bool

        @rtype: L{MessageExtension}
        """
        raise NotImplementedError


class ExtensionRegistry(object):
    """Mapping from extension type URI to a factory class.

    One registry is normally built at startup, filled, and shared by
    every message afterwards. Registration and lookup are serialized, so
    late registration is safe but rarely needed.
    """

    def __init__(self, factory_classes=()):
        self._factories = {}
        self._lock = threading.Lock()
        for factory_class in factory_classes:
            self.addExtensionFactory(factory_class)

    @classmethod
    def default(cls):
        """Return a new registry holding the built-in extensions."""
        from openid_message.extensions import BUILTIN_FACTORIES
        return cls(BUILTIN_FACTORIES)

    def addExtensionFactory(self, factory_class):
        """Register C{factory_class} under the type URI of an instance.

        @raises FactoryInstantiationError: The class could not be
            instantiated or its instance has no type URI.
        """
        from openid_message.message import FactoryInstantiationError

        try:
            factory = factory_class()
        except Exception as why:
            raise FactoryInstantiationError(
                'Cannot instantiate message extension factory class: %r' % (factory_class,)) from why

        type_uri = getattr(factory, 'type_uri', None)
        if not type_uri:
            raise FactoryInstantiationError(
                'Message extension factory class %r has no type URI' % (factory_class,))

        _LOGGER.debug('Adding extension factory for %s', type_uri)
        with self._lock:
            self._factories[type_uri] = factory_class

    def hasExtensionFactory(self, type_uri):
        with self._lock:
            return type_uri in self._factories

    def getExtensionFactory(self, type_uri):
        """Return a new factory for C{type_uri}, or C{None} if there is
        no factory or it can not be instantiated.

        @rtype: Optional[L{MessageExtensionFactory}]
        """
        with self._lock:
            factory_class = self._factories.get(type_uri)

        if factory_class is None:
            return None

        try:
            return factory_class()
        except Exception:
            _LOGGER.exception('Error getting extension factory for %s', type_uri)
            return None

    def getTypeURIs(self):
        with self._lock:
            return set(self._factories)
