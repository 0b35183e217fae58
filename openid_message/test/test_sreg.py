import unittest

from testfixtures import LogCapture

from openid_message.extensions import sreg
from openid_message.message import Message
from openid_message.parameter import ParameterList


class CheckFieldNameTest(unittest.TestCase):
    def test_goodNamePasses(self):
        for field_name in sreg.data_fields:
            sreg.checkFieldName(field_name)

    def test_badNameFails(self):
        self.assertRaises(ValueError, sreg.checkFieldName, 'INVALID')

    def test_badTypeFails(self):
        self.assertRaises(ValueError, sreg.checkFieldName, None)


class SRegRequestTest(unittest.TestCase):
    def test_constructEmpty(self):
        req = sreg.SRegRequest()
        self.assertEqual(req.optional, [])
        self.assertEqual(req.required, [])
        self.assertIsNone(req.policy_url)
        self.assertEqual(req.type_uri, sreg.ns_uri)

    def test_constructFields(self):
        req = sreg.SRegRequest(['nickname'], ['gender'], 'http://policy', 'http://sreg.ns_uri')
        self.assertEqual(req.optional, ['gender'])
        self.assertEqual(req.required, ['nickname'])
        self.assertEqual(req.policy_url, 'http://policy')
        self.assertEqual(req.type_uri, 'http://sreg.ns_uri')

    def test_constructBadFields(self):
        self.assertRaises(ValueError, sreg.SRegRequest, ['elvis'])

    def test_parseExtensionArgs_empty(self):
        req = sreg.SRegRequest()
        req.parseExtensionArgs({})
        self.assertFalse(req.wereFieldsRequested())

    def test_parseExtensionArgs_extraIgnored(self):
        req = sreg.SRegRequest()
        req.parseExtensionArgs({'janrain': 'inc'})
        self.assertEqual(req.allRequestedFields(), [])

    def test_parseExtensionArgs_nonStrict(self):
        req = sreg.SRegRequest()
        with LogCapture('openid_message.extensions.sreg') as logbook:
            req.parseExtensionArgs({'required': 'beans,email'})
        logbook.check(('openid_message.extensions.sreg', 'DEBUG',
                       "Ignoring undefined simple registration field 'beans'"))
        self.assertEqual(req.required, ['email'])

    def test_parseExtensionArgs_strict(self):
        req = sreg.SRegRequest()
        self.assertRaises(ValueError, req.parseExtensionArgs, {'required': 'beans'}, strict=True)

    def test_parseExtensionArgs_strictDuplicate(self):
        req = sreg.SRegRequest()
        self.assertRaises(ValueError, req.parseExtensionArgs, {'required': 'email', 'optional': 'email'},
                          strict=True)

    def test_parseExtensionArgs_requiredOverridesOptional(self):
        req = sreg.SRegRequest()
        req.parseExtensionArgs({'required': 'nickname', 'optional': 'nickname,email'})
        self.assertEqual(req.required, ['nickname'])
        self.assertEqual(req.optional, ['email'])

    def test_parseExtensionArgs_policy(self):
        req = sreg.SRegRequest()
        req.parseExtensionArgs({'policy_url': 'http://policy'})
        self.assertEqual(req.policy_url, 'http://policy')

    def test_contains(self):
        req = sreg.SRegRequest(['nickname'], ['email'])
        self.assertIn('nickname', req)
        self.assertIn('email', req)
        self.assertNotIn('gender', req)
        self.assertEqual(req.allRequestedFields(), ['nickname', 'email'])

    def test_requestField_promote(self):
        req = sreg.SRegRequest()
        req.requestField('email')
        self.assertEqual(req.optional, ['email'])
        req.requestField('email', required=True)
        self.assertEqual(req.optional, [])
        self.assertEqual(req.required, ['email'])

        # Demoting is ignored
        req.requestField('email')
        self.assertEqual(req.required, ['email'])
        self.assertEqual(req.optional, [])

    def test_requestField_strict(self):
        req = sreg.SRegRequest()
        req.requestField('email', strict=True)
        self.assertRaises(ValueError, req.requestField, 'email', strict=True)

    def test_requestFields_type(self):
        req = sreg.SRegRequest()
        self.assertRaises(TypeError, req.requestFields, 'nickname')

    def test_getExtensionArgs(self):
        req = sreg.SRegRequest()
        self.assertEqual(req.getExtensionArgs(), {})

        req.requestField('nickname')
        req.requestField('gender')
        req.requestField('email', required=True)
        req.policy_url = 'http://policy'
        self.assertEqual(req.getExtensionArgs(), {
            'optional': 'nickname,gender',
            'required': 'email',
            'policy_url': 'http://policy',
        })


class SRegResponseTest(unittest.TestCase):
    def test_dataIsCopied(self):
        data = {'nickname': 'linusaur'}
        resp = sreg.SRegResponse(data)
        resp.data['email'] = 'a@example.com'
        data['gender'] = 'F'
        self.assertEqual(data, {'nickname': 'linusaur', 'gender': 'F'})
        self.assertEqual(resp.data, {'nickname': 'linusaur', 'email': 'a@example.com'})

    def test_construct(self):
        resp = sreg.SRegResponse({'nickname': 'linusaur'})
        self.assertTrue(resp)
        self.assertEqual(resp['nickname'], 'linusaur')
        self.assertEqual(resp.get('email', 'none'), 'none')
        self.assertEqual(resp.items(), [('nickname', 'linusaur')])
        self.assertEqual(resp.keys(), ['nickname'])
        self.assertIn('nickname', resp)

    def test_empty(self):
        self.assertFalse(sreg.SRegResponse())

    def test_undefinedField(self):
        resp = sreg.SRegResponse()
        self.assertRaises(ValueError, resp.get, 'beans')
        self.assertRaises(ValueError, resp.__getitem__, 'beans')

    def test_extractResponse(self):
        req = sreg.SRegRequest(['nickname'], ['email'], sreg_ns_uri=sreg.ns_uri_1_0)
        data = {'nickname': 'linusaur', 'postcode': '12345', 'country': 'US'}
        resp = sreg.SRegResponse.extractResponse(req, data)
        self.assertEqual(resp.data, {'nickname': 'linusaur'})
        self.assertEqual(resp.type_uri, sreg.ns_uri_1_0)

    def test_fromArgs(self):
        resp = sreg.SRegResponse.fromArgs({'nickname': 'linusaur', 'beans': 'green'})
        self.assertEqual(resp.getExtensionArgs(), {'nickname': 'linusaur'})


class SRegFactoryTest(unittest.TestCase):
    def test_typeURIs(self):
        self.assertEqual(sreg.SRegFactory.type_uri, sreg.ns_uri_1_1)
        self.assertEqual(sreg.SReg10Factory.type_uri, sreg.ns_uri_1_0)

    def test_request(self):
        params = ParameterList.fromPairs([('required', 'email'), ('policy_url', 'http://policy')])
        req = sreg.SReg10Factory().getExtension(params, True)
        self.assertIsInstance(req, sreg.SRegRequest)
        self.assertEqual(req.required, ['email'])
        self.assertEqual(req.type_uri, sreg.ns_uri_1_0)

    def test_response(self):
        params = ParameterList.fromPairs([('email', 'a@example.com')])
        resp = sreg.SRegFactory().getExtension(params, False)
        self.assertIsInstance(resp, sreg.SRegResponse)
        self.assertEqual(resp['email'], 'a@example.com')
        self.assertEqual(resp.type_uri, sreg.ns_uri_1_1)


class MessageRoundTripTest(unittest.TestCase):
    def test_requestAndResponse(self):
        request = Message({'mode': 'checkid_immediate'})
        sreg.SRegRequest(required=['email'], optional=['nickname']).toMessage(request)
        self.assertEqual(request.getParameterMap(), {
            'mode': 'checkid_immediate',
            'ns.ext1': sreg.ns_uri,
            'ext1.required': 'email',
            'ext1.optional': 'nickname',
        })

        received = Message.fromKVForm(request.toKVForm())
        sreg_request = received.getExtension(sreg.ns_uri)
        self.assertIsInstance(sreg_request, sreg.SRegRequest)

        sreg_response = sreg.SRegResponse.extractResponse(sreg_request, {'email': 'a@example.com', 'dob': '1970'})
        reply = Message({'mode': 'id_res'})
        reply.addExtension(sreg_response)

        received_reply = Message.fromPostArgs(reply.toPostArgs())
        self.assertEqual(received_reply.getExtension(sreg.ns_uri).data, {'email': 'a@example.com'})

    def test_sreg10Namespace(self):
        msg = Message({'mode': 'id_res', 'ns.sreg': sreg.ns_uri_1_0, 'sreg.nickname': 'linusaur'})
        resp = msg.getExtension(sreg.ns_uri_1_0)
        self.assertEqual(resp.type_uri, sreg.ns_uri_1_0)
        self.assertEqual(resp['nickname'], 'linusaur')


if __name__ == '__main__':
    unittest.main()
