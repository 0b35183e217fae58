"""Simple registration request and response parsing and object
representation

This module contains objects representing simple registration requests
and responses that can be used with both OpenID relying parties and
OpenID providers.

  1. The relying party creates a request object and adds it to the
     outgoing message::

       sreg_request = SRegRequest(required=['email'], optional=['nickname'])
       sreg_request.toMessage(message)

  2. The provider resolves the request from the received message,
     builds a response from the user's data and adds it to its reply::

       sreg_request = message.getExtension(ns_uri)
       sreg_response = SRegResponse.extractResponse(sreg_request, user_data)
       reply.addExtension(sreg_response)

  3. The relying party resolves the response the same way::

       sreg_response = reply.getExtension(ns_uri)

@var data_fields: A mapping from the supported field names to
    human-readable descriptions of them.

@var ns_uri: The preferred URI to use for the simple registration
    namespace.
"""
import logging

from openid_message.extension import MessageExtension, MessageExtensionFactory

__all__ = [
    'SRegRequest',
    'SRegResponse',
    'SRegFactory',
    'SReg10Factory',
    'data_fields',
    'ns_uri',
    'ns_uri_1_0',
    'ns_uri_1_1',
    'checkFieldName',
]

_LOGGER = logging.getLogger(__name__)

# The data fields that are listed in the sreg spec
data_fields = {
    'fullname': 'Full Name',
    'nickname': 'Nickname',
    'dob': 'Date of Birth',
    'email': 'E-mail Address',
    'gender': 'Gender',
    'postcode': 'Postal Code',
    'country': 'Country',
    'language': 'Language',
    'timezone': 'Time Zone',
}


def checkFieldName(field_name):
    """Check to see that the given value is a valid simple
    registration data field name.

    @raise ValueError: if the field name is not a valid simple
        registration data field name
    """
    if field_name not in data_fields:
        raise ValueError('%r is not a defined simple registration field' %
                         (field_name,))


# URI used in the wild for Yadis documents advertising simple
# registration support
ns_uri_1_0 = 'http://openid.net/sreg/1.0'

# URI in the draft specification for simple registration 1.1
# <http://openid.net/specs/openid-simple-registration-extension-1_1-01.html>
ns_uri_1_1 = 'http://openid.net/extensions/sreg/1.1'

# This attribute will always hold the preferred URI to use when adding
# sreg support to an XRDS file or in an OpenID namespace declaration.
ns_uri = ns_uri_1_1


class SRegRequest(MessageExtension):
    """An object to hold the state of a simple registration request.

    @ivar required: A list of the required fields in this simple
        registration request
    @type required: List[str]

    @ivar optional: A list of the optional fields in this simple
        registration request
    @type optional: List[str]

    @ivar policy_url: The policy URL that was provided with the request
    @type policy_url: str or NoneType
    """

    def __init__(self, required=None, optional=None, policy_url=None,
                 sreg_ns_uri=ns_uri):
        """Initialize an empty simple registration request"""
        self.required = []
        self.optional = []
        self.policy_url = policy_url
        self.type_uri = sreg_ns_uri

        if required:
            self.requestFields(required, required=True, strict=True)

        if optional:
            self.requestFields(optional, required=False, strict=True)

    @classmethod
    def fromArgs(cls, args, strict=False, sreg_ns_uri=ns_uri):
        """Create a simple registration request from the arguments of
        an extension."""
        self = cls(sreg_ns_uri=sreg_ns_uri)
        self.parseExtensionArgs(args, strict)
        return self

    def parseExtensionArgs(self, args, strict=False):
        """Parse the unqualified simple registration request
        parameters and add them to this object.

        @param args: The unqualified simple registration arguments
        @type args: Dict[str, str]

        @param strict: Whether requests with fields that are not
            defined in the simple registration specification should be
            tolerated (and ignored)
        @type strict: bool

        @raises ValueError: When strict is true and a field is not
            defined.
        """
        for list_name in ['required', 'optional']:
            required = (list_name == 'required')
            items = args.get(list_name)
            if items:
                for field_name in items.split(','):
                    try:
                        self.requestField(field_name, required, strict)
                    except ValueError:
                        if strict:
                            raise
                        _LOGGER.debug('Ignoring undefined simple registration field %r', field_name)

        self.policy_url = args.get('policy_url')

    def allRequestedFields(self):
        """A list of all of the simple registration fields that were
        requested, whether they were required or optional.

        @rtype: List[str]
        """
        return self.required + self.optional

    def wereFieldsRequested(self):
        """Have any simple registration fields been requested?

        @rtype: bool
        """
        return bool(self.allRequestedFields())

    def __contains__(self, field_name):
        """Was this field in the request?"""
        return (field_name in self.required or
                field_name in self.optional)

    def requestField(self, field_name, required=False, strict=False):
        """Request the specified field from the OpenID user

        @param field_name: the unqualified simple registration field name
        @type field_name: str

        @param required: whether the given field should be presented
            to the user as being a required to successfully complete
            the request

        @param strict: whether to raise an exception when a field is
            added to a request more than once

        @raise ValueError: when the field requested is not a simple
            registration field or strict is set and the field was
            requested more than once
        """
        checkFieldName(field_name)

        if strict:
            if field_name in self.required or field_name in self.optional:
                raise ValueError('That field has already been requested')
        else:
            if field_name in self.required:
                return

            if field_name in self.optional:
                if required:
                    self.optional.remove(field_name)
                else:
                    return

        if required:
            self.required.append(field_name)
        else:
            self.optional.append(field_name)

    def requestFields(self, field_names, required=False, strict=False):
        """Add the given list of fields to the request

        @param field_names: The simple registration data fields to request
        @type field_names: List[str]

        @param required: Whether these values should be presented to
            the user as required

        @param strict: whether to raise an exception when a field is
            added to a request more than once

        @raise ValueError: when a field requested is not a simple
            registration field or strict is set and a field was
            requested more than once
        """
        if isinstance(field_names, str):
            raise TypeError('Fields should be passed as a list of '
                            'strings (not %r)' % (type(field_names),))

        for field_name in field_names:
            self.requestField(field_name, required, strict=strict)

    def getExtensionArgs(self):
        """Get a dictionary of unqualified simple registration
        arguments representing this request.
        """
        args = {}

        if self.required:
            args['required'] = ','.join(self.required)

        if self.optional:
            args['optional'] = ','.join(self.optional)

        if self.policy_url:
            args['policy_url'] = self.policy_url

        return args


class SRegResponse(MessageExtension):
    """Represents the data returned in a simple registration response
    inside of an OpenID C{id_res} response. This object will be
    created by the OpenID server, added to the C{id_res} response
    object, and then extracted from the C{id_res} message by the
    Consumer.

    @ivar data: The simple registration data, keyed by the unqualified
        simple registration name of the field (i.e. nickname is keyed
        by C{'nickname'})
    """

    def __init__(self, data=None, sreg_ns_uri=ns_uri):
        if data is None:
            self.data = {}
        else:
            self.data = dict(data)

        self.type_uri = sreg_ns_uri

    @classmethod
    def extractResponse(cls, request, data):
        """Take a C{L{SRegRequest}} and a dictionary of simple
        registration values and create a C{L{SRegResponse}}
        object containing that data.

        @param request: The simple registration request object
        @type request: SRegRequest

        @param data: The simple registration data for this
            response, as a dictionary from unqualified simple
            registration field name to string (unicode) value. For
            instance, the nickname should be stored under the key
            'nickname'.

        @returns: a simple registration response object
        """
        self = cls(sreg_ns_uri=request.type_uri)
        for field in request.allRequestedFields():
            value = data.get(field)
            if value is not None:
                self.data[field] = value
        return self

    @classmethod
    def fromArgs(cls, args, sreg_ns_uri=ns_uri):
        """Create a response from the arguments of an extension,
        keeping only the defined simple registration fields."""
        self = cls(sreg_ns_uri=sreg_ns_uri)
        for field_name in data_fields:
            value = args.get(field_name)
            if value is not None:
                self.data[field_name] = value
        return self

    def getExtensionArgs(self):
        """Get the fields to put in the simple registration namespace
        when adding them to an id_res message.
        """
        return self.data

    # Read-only dictionary interface
    def get(self, field_name, default=None):
        """Like dict.get, except that it checks that the field name is
        defined by the simple registration specification"""
        checkFieldName(field_name)
        return self.data.get(field_name, default)

    def items(self):
        """All of the data values in this simple registration response
        """
        return list(self.data.items())

    def keys(self):
        return list(self.data.keys())

    def __getitem__(self, field_name):
        """Like dict[key]"""
        checkFieldName(field_name)
        return self.data[field_name]

    def __contains__(self, field_name):
        checkFieldName(field_name)
        return field_name in self.data

    def __bool__(self):
        return bool(self.data)


class SRegFactory(MessageExtensionFactory):
    """Builds a request from a C{checkid_*} message and a response from
    any other message."""

    type_uri = ns_uri_1_1

    def getExtension(self, parameters, is_request):
        args = dict(parameters.toPairs())
        if is_request:
            return SRegRequest.fromArgs(args, sreg_ns_uri=self.type_uri)
        return SRegResponse.fromArgs(args, sreg_ns_uri=self.type_uri)


class SReg10Factory(SRegFactory):
    type_uri = ns_uri_1_0
