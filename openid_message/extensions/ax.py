"""Implements the OpenID Attribute Exchange specification, version 1.0.

@see: http://openid.net/specs/openid-attribute-exchange-1_0.html
"""
from openid_message.extension import MessageExtension, MessageExtensionFactory

__all__ = [
    'AttrInfo',
    'AXError',
    'NotAXMessage',
    'FetchRequest',
    'FetchResponse',
    'StoreRequest',
    'StoreResponse',
    'AXMessageFactory',
    'checkAlias',
    'ns_uri',
]

# The namespace for this extension
ns_uri = 'http://openid.net/srv/ax/1.0'

# Use this as the 'count' value for an attribute in a FetchRequest to
# ask for as many values as the OP can provide.
UNLIMITED_VALUES = "unlimited"

# Minimum supported alias length in characters.  Here for
# completeness.
MINIMUM_SUPPORTED_ALIAS_LENGTH = 32


def checkAlias(alias):
    """
    Check an alias for invalid characters; raise AXError if any are
    found.  Return None if the alias is valid.
    """
    if ',' in alias:
        raise AXError("Alias %r must not contain comma" % (alias,))
    if '.' in alias:
        raise AXError("Alias %r must not contain period" % (alias,))


class AXError(ValueError):
    """Results from data that does not meet the attribute exchange 1.0
    specification"""


class NotAXMessage(AXError):
    """Raised when there is no Attribute Exchange mode in the message."""

    def __repr__(self):
        return self.__class__.__name__

    def __str__(self):
        return self.__class__.__name__


class AXMessage(MessageExtension):
    """Abstract class containing common code for attribute exchange
    messages

    @cvar mode: The value of the mode parameter for this message
        type. This is expected to be set in subclasses.
    """
    type_uri = ns_uri
    mode = None

    def _checkMode(self, ax_args):
        """Raise an exception if the mode in the attribute exchange
        arguments does not match what is expected for this class.

        @raises NotAXMessage: When there is no mode value in ax_args at all.

        @raises AXError: When mode does not match.
        """
        mode = ax_args.get('mode')
        if mode != self.mode:
            if not mode:
                raise NotAXMessage()
            else:
                raise AXError(
                    'Expected mode %r; got %r' % (self.mode, mode))

    def _newArgs(self):
        """Return a set of attribute exchange arguments containing the
        basic information that must be in every attribute exchange
        message.
        """
        return {'mode': self.mode}


class AttrInfo(object):
    """Represents a single attribute in an attribute exchange
    request. This should be added to an AXRequest object in order to
    request the attribute.

    @ivar required: Whether the attribute will be marked as required
        when presented to the subject of the attribute exchange
        request.
    @type required: bool

    @ivar count: How many values of this type to request from the
        subject. Defaults to one.
    @type count: int

    @ivar type_uri: The identifier that determines what the attribute
        represents and how it is serialized. For example, one type URI
        representing dates could represent a Unix timestamp in base 10
        and another could represent a human-readable string.
    @type type_uri: str

    @ivar alias: The name that should be given to this alias in the
        request. If it is not supplied, a generic name will be
        assigned. For example, if you want to call a Unix timestamp
        value 'tstamp', set its alias to that value. If two attributes
        in the same message request to use the same alias, the request
        will fail to be generated.
    @type alias: str or NoneType
    """

    def __init__(self, type_uri, count=1, required=False, alias=None):
        self.required = required
        self.count = count
        self.type_uri = type_uri
        self.alias = alias

        if self.alias is not None:
            checkAlias(self.alias)

    def wantsUnlimitedValues(self):
        """
        When processing a request for this attribute, the OP should
        call this method to determine whether all available attribute
        values were requested.  If self.count == UNLIMITED_VALUES,
        this returns True.  Otherwise this returns False, in which
        case self.count is an integer.
        """
        return self.count == UNLIMITED_VALUES


def _splitAliases(value):
    if not value:
        return []
    return value.split(',')


class FetchRequest(AXMessage):
    """An attribute exchange 'fetch_request' message. This message is
    sent by a relying party when it wishes to obtain attributes about
    the subject of an OpenID authentication request.

    @ivar requested_attributes: The attributes that have been
        requested thus far, indexed by the type URI.
    @type requested_attributes: Dict[str, AttrInfo]

    @ivar update_url: A URL that will accept responses for this
        attribute exchange request, even in the absence of the user
        who made this request.
    """
    mode = 'fetch_request'

    def __init__(self, update_url=None):
        self.requested_attributes = {}
        self.update_url = update_url

    def add(self, attribute):
        """Add an attribute to this attribute exchange request.

        @param attribute: The attribute that is being requested
        @type attribute: C{L{AttrInfo}}

        @raises KeyError: when the requested attribute is already
            present in this fetch request.
        """
        if attribute.type_uri in self.requested_attributes:
            raise KeyError('The attribute %r has already been requested'
                           % (attribute.type_uri,))

        self.requested_attributes[attribute.type_uri] = attribute

    def getExtensionArgs(self):
        """Get the serialized form of this attribute fetch request.

        Attributes without an alias get C{attr<N>}, numbered in the
        order they were added.
        """
        ax_args = self._newArgs()
        required = []
        if_available = []
        explicit = [attr.alias for attr in self.requested_attributes.values() if attr.alias is not None]
        used_aliases = set(explicit)
        if len(used_aliases) != len(explicit):
            raise KeyError('Two requested attributes share an alias')

        generated = 0
        for type_uri, attribute in self.requested_attributes.items():
            alias = attribute.alias
            if alias is None:
                while True:
                    generated += 1
                    alias = 'attr%d' % (generated,)
                    if alias not in used_aliases:
                        break
                used_aliases.add(alias)

            if attribute.required:
                required.append(alias)
            else:
                if_available.append(alias)

            if attribute.count != 1:
                ax_args['count.' + alias] = str(attribute.count)

            ax_args['type.' + alias] = type_uri

        if required:
            ax_args['required'] = ','.join(required)

        if if_available:
            ax_args['if_available'] = ','.join(if_available)

        if self.update_url:
            ax_args['update_url'] = self.update_url

        return ax_args

    def getRequiredAttrs(self):
        """Get the type URIs for all attributes that have been marked
        as required.

        @returns: A list of the type URIs for attributes that have
            been marked as required.
        @rtype: List[str]
        """
        return [type_uri for type_uri, attribute in self.requested_attributes.items() if attribute.required]

    def parseExtensionArgs(self, ax_args):
        """Given attribute exchange arguments, populate this FetchRequest.

        Every alias with a type must be listed in C{required} or
        C{if_available} and every listed alias must have a type.

        @raises AXError: The arguments are not a valid fetch request.
        """
        aliases = {}
        for key, value in ax_args.items():
            if key.startswith('type.'):
                alias = key[len('type.'):]
                checkAlias(alias)
                aliases[alias] = value

        required = _splitAliases(ax_args.get('required'))
        listed = required + _splitAliases(ax_args.get('if_available'))
        for alias in listed:
            if alias not in aliases:
                raise AXError('Type URI for alias %r not found' % (alias,))

        for alias, type_uri in aliases.items():
            if alias not in listed:
                raise AXError('Type URI %r for alias %r is neither required nor if_available' % (type_uri, alias))

            count_s = ax_args.get('count.' + alias, '1')
            if count_s == UNLIMITED_VALUES:
                count = count_s
            else:
                try:
                    count = int(count_s)
                except ValueError:
                    raise AXError('Integer value expected for count.%s, got %r' % (alias, count_s))

            try:
                self.add(AttrInfo(type_uri, count=count, required=alias in required, alias=alias))
            except KeyError:
                raise AXError('Type URI %r is requested more than once' % (type_uri,))

        self.update_url = ax_args.get('update_url')

    @classmethod
    def fromArgs(cls, ax_args):
        """Build a fetch request from the arguments of an extension.

        @raises AXError: The arguments are not a valid fetch request.
        """
        self = cls()
        self._checkMode(ax_args)
        self.parseExtensionArgs(ax_args)
        return self

    def iterAttrs(self):
        """Iterate over the AttrInfo objects that are
        contained in this fetch_request.
        """
        return iter(self.requested_attributes.values())

    def __iter__(self):
        """Iterate over the attribute type URIs in this fetch_request
        """
        return iter(self.requested_attributes)

    def __contains__(self, type_uri):
        """Is the given type URI present in this fetch_request?
        """
        return type_uri in self.requested_attributes


class AXKeyValueMessage(AXMessage):
    """An abstract class that implements a message that has attribute
    keys and values. It contains the common code between
    fetch_response and store_request.
    """

    def __init__(self):
        AXMessage.__init__(self)
        self.data = {}
        self.aliases = {}

    def addValue(self, type_uri, value, alias=None):
        """Add a single value for the given attribute type to the
        message. If there are already values specified for this type,
        this value will be sent in addition to the values already
        specified.
        """
        self.data.setdefault(type_uri, []).append(value)
        if alias is not None:
            checkAlias(alias)
            self.aliases[type_uri] = alias

    def setValues(self, type_uri, values, alias=None):
        """Set the values for the given attribute type. This replaces
        any values that have already been set for this attribute.
        """
        self.data[type_uri] = list(values)
        if alias is not None:
            checkAlias(alias)
            self.aliases[type_uri] = alias

    def _getExtensionKVArgs(self):
        """Get the extension arguments for the key/value pairs
        contained in this message.

        A single non-empty value is sent as C{value.<alias>}, any other
        number of values and a lone empty value as C{count.<alias>} and
        C{value.<alias>.<n>} counted from one, since an empty
        C{value.<alias>} means no values.
        """
        ax_args = {}
        used_aliases = set(self.aliases.values())
        generated = 0

        for type_uri, values in self.data.items():
            alias = self.aliases.get(type_uri)
            if alias is None:
                while True:
                    generated += 1
                    alias = 'attr%d' % (generated,)
                    if alias not in used_aliases:
                        break
                used_aliases.add(alias)

            ax_args['type.' + alias] = type_uri
            if len(values) == 1 and values[0]:
                ax_args['value.' + alias] = values[0]
            else:
                ax_args['count.' + alias] = str(len(values))
                for i, value in enumerate(values, 1):
                    ax_args['value.%s.%d' % (alias, i)] = value

        return ax_args

    def parseExtensionArgs(self, ax_args):
        """Parse attribute exchange key/value arguments into this
        object. A lone empty C{value.<alias>} means no values.

        @raises AXError: The arguments are inconsistent.
        """
        for key, type_uri in ax_args.items():
            if not key.startswith('type.'):
                continue
            alias = key[len('type.'):]
            checkAlias(alias)
            if type_uri in self.aliases:
                raise AXError('Type URI %r is sent under aliases %r and %r'
                              % (type_uri, self.aliases[type_uri], alias))
            self.aliases[type_uri] = alias

            count_key = 'count.' + alias
            count_s = ax_args.get(count_key)
            if count_s is None:
                value = ax_args.get('value.' + alias)
                if value is None:
                    raise AXError('No value found for key %r' % ('value.' + alias,))
                if value:
                    values = [value]
                else:
                    values = []
            else:
                try:
                    count = int(count_s)
                except ValueError:
                    raise AXError('Integer value expected for %s, got %r' % (count_key, count_s))

                values = []
                for i in range(1, count + 1):
                    value_key = 'value.%s.%d' % (alias, i)
                    value = ax_args.get(value_key)
                    if value is None:
                        raise AXError('No value found for key %r' % (value_key,))
                    values.append(value)

            self.data[type_uri] = values

    @classmethod
    def fromArgs(cls, ax_args):
        """@raises AXError: The arguments are not a valid message of
        this mode."""
        self = cls()
        self._checkMode(ax_args)
        self.parseExtensionArgs(ax_args)
        return self

    def getSingle(self, type_uri, default=None):
        """Get a single value for an attribute. If no value was sent
        for this attribute, use the supplied default. If there is more
        than one value for this attribute, this method will fail.

        @raises AXError: If there is more than one value for this
            attribute.
        """
        values = self.data.get(type_uri)
        if not values:
            return default
        elif len(values) == 1:
            return values[0]
        else:
            raise AXError(
                'More than one value present for %r' % (type_uri,))

    def get(self, type_uri):
        """Get the list of values for this attribute in the
        fetch_response.

        @raises KeyError: If the attribute was not sent in this response
        """
        return self.data[type_uri]

    def count(self, type_uri):
        return len(self.get(type_uri))

    def __getitem__(self, type_uri):
        return self.get(type_uri)

    def __contains__(self, type_uri):
        return type_uri in self.data


class FetchResponse(AXKeyValueMessage):
    """A fetch_response attribute exchange message
    """
    mode = 'fetch_response'

    def __init__(self, update_url=None):
        AXKeyValueMessage.__init__(self)
        self.update_url = update_url

    def getExtensionArgs(self):
        ax_args = self._newArgs()
        ax_args.update(self._getExtensionKVArgs())
        if self.update_url:
            ax_args['update_url'] = self.update_url
        return ax_args

    def parseExtensionArgs(self, ax_args):
        AXKeyValueMessage.parseExtensionArgs(self, ax_args)
        self.update_url = ax_args.get('update_url')


class StoreRequest(AXKeyValueMessage):
    """A store request attribute exchange message representation
    """
    mode = 'store_request'

    def getExtensionArgs(self):
        ax_args = self._newArgs()
        ax_args.update(self._getExtensionKVArgs())
        return ax_args


class StoreResponse(AXMessage):
    """An indication that the store request was processed along with
    this OpenID transaction.
    """

    SUCCESS_MODE = 'store_response_success'
    FAILURE_MODE = 'store_response_failure'

    def __init__(self, succeeded=True, error_message=None):
        AXMessage.__init__(self)
        if succeeded and error_message is not None:
            raise AXError('An error message may only be included in a '
                          'failing fetch response')
        if succeeded:
            self.mode = self.SUCCESS_MODE
        else:
            self.mode = self.FAILURE_MODE

        self.error_message = error_message

    def succeeded(self):
        """Was this response a success response?"""
        return self.mode == self.SUCCESS_MODE

    def getExtensionArgs(self):
        ax_args = self._newArgs()
        if not self.succeeded() and self.error_message:
            ax_args['error'] = self.error_message

        return ax_args

    @classmethod
    def fromArgs(cls, ax_args):
        mode = ax_args.get('mode')
        if mode == cls.SUCCESS_MODE:
            return cls()
        elif mode == cls.FAILURE_MODE:
            return cls(False, ax_args.get('error'))
        elif not mode:
            raise NotAXMessage()
        else:
            raise AXError('Expected a store response mode; got %r' % (mode,))


class AXMessageFactory(MessageExtensionFactory):
    """Builds attribute exchange messages from the parameters of an
    OpenID message, choosing the class by the C{mode} parameter."""

    type_uri = ns_uri

    request_modes = {
        FetchRequest.mode: FetchRequest,
        StoreRequest.mode: StoreRequest,
    }

    response_modes = {
        FetchResponse.mode: FetchResponse,
        StoreResponse.SUCCESS_MODE: StoreResponse,
        StoreResponse.FAILURE_MODE: StoreResponse,
    }

    def getExtension(self, parameters, is_request):
        """
        @raises NotAXMessage: There is no AX mode.
        @raises AXError: The mode is unknown or does not fit the kind
            of the enclosing message.
        """
        ax_args = dict(parameters.toPairs())
        mode = ax_args.get('mode')
        if not mode:
            raise NotAXMessage()

        if is_request:
            modes = self.request_modes
        else:
            modes = self.response_modes

        try:
            message_class = modes[mode]
        except KeyError:
            raise AXError('Invalid value for mode in AX %s: %r' % ('request' if is_request else 'response', mode))

        return message_class.fromArgs(ax_args)
