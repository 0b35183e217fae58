"""OpenID protocol messages and their extension namespaces.

Parameter keys are kept without the C{openid.} prefix, the way they
appear in key-value form (C{mode}, C{ns.ext1}, C{ext1.required}). The
prefix is added when the message is encoded for a browser redirect.

Each extension gets a private sub-namespace: the message declares
C{ns.<alias>} with the extension type URI as value, and the extension
parameters are stored under C{<alias>.<name>}, or under the bare alias
when the name is empty. Aliases generated by this module are C{ext1},
C{ext2}, ...
"""
import logging
from urllib.parse import urlencode

from lxml import etree

from openid_message import kvform, oidutil
from openid_message.extension import ExtensionRegistry
from openid_message.parameter import Parameter, ParameterList

__all__ = [
    'Message', 'ExtensionAliasMap',
    'MessageError', 'MalformedMessage', 'DuplicateExtension', 'ExtensionNotSupported',
    'FactoryInstantiationError', 'IllegalState',
    'OPENID2_NS', 'OPENID_PREFIX', 'NS_PREFIX', 'ALIAS_PREFIX',
    'MODE_IDRES', 'MODE_CANCEL', 'MODE_SETUP_NEEDED', 'REQUEST_MODE_PREFIX',
]


_LOGGER = logging.getLogger(__name__)

# The OpenID 2.0 namespace URI
OPENID2_NS = 'http://specs.openid.net/auth/2.0'

# Prefix of every key in an indirect (browser) message
OPENID_PREFIX = 'openid.'

# Prefix of the keys declaring an extension alias
NS_PREFIX = 'ns.'

# Generated extension aliases are ALIAS_PREFIX followed by a number
ALIAS_PREFIX = 'ext'

MODE_IDRES = 'id_res'
MODE_CANCEL = 'cancel'
MODE_SETUP_NEEDED = 'setup_needed'

# Modes of authentication requests start with this
REQUEST_MODE_PREFIX = 'checkid_'


class MessageError(Exception):
    """Base class for the errors raised by this package."""


class MalformedMessage(MessageError, ValueError):
    """The parameters do not make a valid message of the requested
    type."""


class DuplicateExtension(MessageError):
    """An extension with the same type URI is already in the message."""


class ExtensionNotSupported(MessageError):
    """There is no usable factory for the requested extension."""


class FactoryInstantiationError(MessageError):
    """A registered factory class could not be instantiated."""


class IllegalState(MessageError, RuntimeError):
    """The operation is not available for this message, e.g. asking a
    received message where it should be sent."""


def declaredAlias(key):
    """Return the alias declared by a C{ns.<alias>} key, or C{None} if
    C{key} is not an alias declaration."""
    if key.startswith(NS_PREFIX) and len(key) > len(NS_PREFIX):
        return key[len(NS_PREFIX):]
    return None


class ExtensionAliasMap(object):
    """Bookkeeping between extension type URIs and the aliases of one
    message.

    @ivar counter: Seed of the next generated alias. It only grows.
    """

    def __init__(self):
        self.type_to_alias = {}
        self.alias_to_type = {}
        self.counter = 0

    @classmethod
    def fromParameters(cls, parameters):
        """Rebuild the map from the alias declarations in C{parameters}.

        The counter starts at the number of declared extensions.
        """
        self = cls()
        for parameter in parameters:
            alias = declaredAlias(parameter.key)
            if alias is not None:
                self.bind(parameter.value, alias)

        self.counter = len(self.type_to_alias)
        return self

    def bind(self, type_uri, alias):
        self.type_to_alias[type_uri] = alias
        self.alias_to_type[alias] = type_uri

    def unbindAlias(self, alias):
        """Forget C{alias} and return the type URI it was bound to, if
        any."""
        type_uri = self.alias_to_type.pop(alias, None)
        if type_uri is not None:
            del self.type_to_alias[type_uri]
        return type_uri

    def getAlias(self, type_uri):
        return self.type_to_alias.get(type_uri)

    def getTypeURI(self, alias):
        return self.alias_to_type.get(alias)

    def isDefined(self, type_uri):
        return type_uri in self.type_to_alias

    def __contains__(self, type_uri):
        return self.isDefined(type_uri)

    def __len__(self):
        return len(self.type_to_alias)

    def typeURIs(self):
        return set(self.type_to_alias)

    def nextAlias(self, is_taken=lambda alias: False):
        """Advance the counter to the next free alias and return it.

        An alias is free when it is not bound here and C{is_taken}
        rejects it.
        """
        while True:
            self.counter += 1
            alias = '%s%d' % (ALIAS_PREFIX, self.counter)
            if alias not in self.alias_to_type and not is_taken(alias):
                return alias


class Message(object):
    """A set of OpenID protocol parameters.

    Messages that are sent have a destination URL, received ones do
    not.

    @cvar required_fields: Keys that must be present for the message
        to be valid. Subclasses for specific message types override it.

    @cvar request_mode_prefix: A C{mode} value with this prefix marks
        the message as a request when its extensions are parsed.

    @ivar registry: The extension factories this message resolves
        extensions with.
    @type registry: L{ExtensionRegistry}
    """

    required_fields = ()
    request_mode_prefix = REQUEST_MODE_PREFIX

    def __init__(self, params=None, destination_url=None, registry=None):
        """Create a message, without validating it.

        @param params: The parameters, a L{ParameterList}, a mapping or
            a sequence of pairs. When given, the extension aliases are
            read from the C{ns.*} declarations among them.

        @param destination_url: Where the message should be sent, for
            outgoing messages.

        @param registry: Defaults to a registry of the built-in
            extensions.
        """
        if params is None:
            params = ParameterList()
        elif not isinstance(params, ParameterList):
            if hasattr(params, 'items'):
                params = ParameterList.fromMapping(params)
            else:
                params = ParameterList.fromPairs(params)

        if registry is None:
            registry = ExtensionRegistry.default()

        self._params = params
        self.aliases = ExtensionAliasMap.fromParameters(params)
        self._extensions = {}
        self._destination_url = destination_url
        self.registry = registry

    @classmethod
    def createMessage(cls, params=None, destination_url=None, registry=None):
        """Create a message and check that it is valid.

        @raises MalformedMessage: The parameters are not valid for this
            message type.
        """
        message = cls(params, destination_url=destination_url, registry=registry)

        if not message.isValid():
            raise MalformedMessage('Invalid set of parameters for the requested message type')

        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug('Created message:\n%s', message.toKVForm())

        return message

    @classmethod
    def fromKVForm(cls, kvform_string, registry=None):
        """Create a message from a key-value form response body."""
        return cls.createMessage(ParameterList.fromKVForm(kvform_string), registry=registry)

    @classmethod
    def fromPostArgs(cls, args, registry=None):
        """Create a message from the query or POST arguments of an
        indirect message. The C{openid.} prefix is removed from the
        keys, arguments without it are not part of the message.

        @type args: Mapping[str, str]
        """
        params = ParameterList()
        for key, value in args.items():
            if isinstance(value, list):
                raise TypeError("query dict must have one value for each key, "
                                "not lists of values.  Query is %r" % (args,))

            if key.startswith(OPENID_PREFIX):
                params.set(Parameter(key[len(OPENID_PREFIX):], value))
            else:
                _LOGGER.debug('Ignoring non-OpenID argument %r', key)

        return cls.createMessage(params, registry=registry)

    def __repr__(self):
        return '<%s.%s %r>' % (self.__class__.__module__, self.__class__.__name__, self._params.toPairs())

    # Parameters

    def getParameter(self, key):
        return self._params.getParameter(key)

    def getParameterValue(self, key):
        return self._params.getParameterValue(key)

    def hasParameter(self, key):
        return self._params.hasParameter(key)

    def setParameter(self, key, value):
        """Set a single parameter by its full key.

        Setting a C{ns.<alias>} key declares the alias for the type URI
        C{value}, replacing the type the alias was declared for before.
        Extension parameters are better added with L{addExtension},
        which also chooses the alias.

        @raises DuplicateExtension: C{key} declares an alias for a type
            URI that already has another alias.
        """
        alias = declaredAlias(key)
        if alias is not None:
            bound = self.aliases.getAlias(value)
            if bound is not None and bound != alias:
                raise DuplicateExtension('Extension %s is already declared with alias %s' % (value, bound))

            replaced = self.aliases.unbindAlias(alias)
            if replaced is not None:
                self._extensions.pop(replaced, None)
            self.aliases.bind(value, alias)
            self._extensions.pop(value, None)

        self._params.set(Parameter(key, value))

    def getParameters(self):
        """@rtype: List[Parameter]"""
        return self._params.getParameters()

    def getParameterMap(self):
        """Return the parameters as a dictionary in message order."""
        return dict(self._params.toPairs())

    def getRequiredFields(self):
        return list(self.required_fields)

    def isValid(self):
        """Check that every parameter is valid and all required
        parameters are present."""
        for parameter in self._params:
            if not parameter.isValid():
                _LOGGER.warning('Invalid parameter: %r', parameter)
                return False

        for required in self.getRequiredFields():
            if not self.hasParameter(required):
                _LOGGER.warning('Required parameter missing: %s', required)
                return False

        return True

    def isRequest(self):
        """Is this message an authentication request?

        A message without C{mode} is not.
        """
        mode = self.getParameterValue('mode')
        if mode is None:
            _LOGGER.debug('Message has no mode, handling it as a response')
            return False
        return mode.startswith(self.request_mode_prefix)

    # Encodings

    def toKVForm(self):
        """Generate a key-value form string with one C{key:value} line
        per parameter, in message order.
        """
        return kvform.seqToKV(self._params.toPairs())

    def _postPairs(self):
        pairs = []
        for key, value in self._params.toPairs():
            if not key.startswith(OPENID_PREFIX):
                key = OPENID_PREFIX + key
            pairs.append((key, value))
        return pairs

    def toPostArgs(self):
        """Return all parameters with C{openid.} in front of the keys."""
        return dict(self._postPairs())

    def toURLEncoded(self):
        """Generate an x-www-urlencoded string of the parameters, in
        message order, with C{openid.} in front of every key.

        Keys and values are encoded as UTF-8.
        """
        return urlencode(self._postPairs())

    # Spelling used by other OpenID implementations
    keyValueFormEncoding = toKVForm
    wwwFormEncoding = toURLEncoded

    def setDestinationUrl(self, destination_url):
        self._destination_url = destination_url

    def getDestinationUrl(self, http_get=False):
        """Get the URL where the message should be sent.

        @param http_get: If true, the URL-encoded parameters are appended
            as query, for a GET redirect. Otherwise the URL is returned
            verbatim, for a form POST.
        @type http_get: bool

        @raises IllegalState: No destination, e.g. a received message.
        """
        if self._destination_url is None:
            raise IllegalState('Destination URL not set; is this a received message?')

        if http_get:
            return oidutil.appendQuery(self._destination_url, self.toURLEncoded())
        return self._destination_url

    def toFormMarkup(self, form_tag_attrs=None, submit_text='Continue'):
        """Generate HTML form markup that POSTs this message to its
        destination as x-www-form-urlencoded UTF-8.

        @param form_tag_attrs: Dictionary of attributes to be added to
            the form tag. 'accept-charset' and 'enctype' have defaults
            that can be overridden. If a value is supplied for
            'action' or 'method', it will be replaced.
        @type form_tag_attrs: Dict[str, str]

        @param submit_text: The text that will appear on the submit
            button for this form.
        @type submit_text: str

        @rtype: str
        """
        form = etree.Element('form', {
            'accept-charset': 'UTF-8',
            'enctype': 'application/x-www-form-urlencoded',
        })

        if form_tag_attrs:
            for name, attr in form_tag_attrs.items():
                form.attrib[name] = attr

        form.attrib['action'] = self.getDestinationUrl(False)
        form.attrib['method'] = 'post'

        for name, value in self._postPairs():
            etree.SubElement(form, 'input', {'type': 'hidden', 'name': name, 'value': value})

        etree.SubElement(form, 'input', {'type': 'submit', 'value': submit_text})

        return etree.tostring(form, encoding='unicode')

    def toHTML(self, form_tag_attrs=None, submit_text='Continue'):
        """Wrap L{toFormMarkup} in a page that submits it on load."""
        return oidutil.autoSubmitHTML(self.toFormMarkup(form_tag_attrs, submit_text))

    # Extensions

    def addExtensionFactory(self, factory_class):
        self.registry.addExtensionFactory(factory_class)

    def hasExtensionFactory(self, type_uri):
        return self.registry.hasExtensionFactory(type_uri)

    def getExtensionFactory(self, type_uri):
        return self.registry.getExtensionFactory(type_uri)

    def getExtensionAlias(self, type_uri):
        """Return the alias of the extension, or C{None} if the message
        has no parameters for it."""
        return self.aliases.getAlias(type_uri)

    def getExtensions(self):
        """Return the type URIs of the extensions present in the
        message."""
        return self.aliases.typeURIs()

    def hasExtension(self, type_uri):
        return self.aliases.isDefined(type_uri)

    def _isKeyTaken(self, alias):
        return self.hasParameter(NS_PREFIX + alias) or self.hasParameter(alias)

    def addExtension(self, extension):
        """Add the parameters of an extension under a new alias.

        The extension parameter names must not carry any alias prefix;
        it is generated here.

        @type extension: L{MessageExtension<openid_message.extension.MessageExtension>}

        @raises DuplicateExtension: The message already has the
            extension.
        """
        type_uri = extension.type_uri

        if self.hasExtension(type_uri):
            raise DuplicateExtension('Extension already present: %s' % (type_uri,))

        # Nothing is changed until the extension produced its parameters.
        extension_params = extension.getParameters()

        alias = self.aliases.nextAlias(self._isKeyTaken)
        _LOGGER.debug('Adding extension; type URI: %s alias: %s', type_uri, alias)

        self.setParameter(NS_PREFIX + alias, type_uri)
        for parameter in extension_params:
            if parameter.key:
                key = '%s.%s' % (alias, parameter.key)
            else:
                key = alias
            self._params.set(Parameter(key, parameter.value))

    def getExtensionParams(self, type_uri):
        """Return the parameters of an extension with the alias prefix
        removed. The C{ns.<alias>} declaration is not included.

        @rtype: L{ParameterList}
        """
        extension_params = ParameterList()

        alias = self.getExtensionAlias(type_uri)
        if alias is None:
            return extension_params

        prefix = alias + '.'
        for parameter in self._params:
            if parameter.key.startswith(prefix):
                name = parameter.key[len(prefix):]
            elif parameter.key == alias:
                name = ''
            else:
                continue
            extension_params.set(Parameter(name, parameter.value))

        return extension_params

    def getExtension(self, type_uri):
        """Get the extension object for C{type_uri}, built from the
        parameters of this message by the registered factory. The object
        is built once and returned again by later calls.

        @raises ExtensionNotSupported: There is no usable factory.
        """
        try:
            return self._extensions[type_uri]
        except KeyError:
            pass

        factory = self.registry.getExtensionFactory(type_uri)
        if factory is None:
            raise ExtensionNotSupported('Cannot instantiate extension: %s' % (type_uri,))

        _LOGGER.debug('Extracting %s extension from message...', type_uri)

        extension = factory.getExtension(self.getExtensionParams(type_uri), self.isRequest())
        self._extensions[type_uri] = extension
        return extension
