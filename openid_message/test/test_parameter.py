import unittest

from openid_message.parameter import Parameter, ParameterList


class ParameterTest(unittest.TestCase):
    def test_valid(self):
        self.assertTrue(Parameter('mode', 'id_res').isValid())
        self.assertTrue(Parameter('ext1', '').isValid())
        self.assertTrue(Parameter('return_to', 'http://example.com:8000/?a=b').isValid())

    def test_invalid(self):
        self.assertFalse(Parameter('mo:de', 'id_res').isValid())
        self.assertFalse(Parameter('mode\n', 'id_res').isValid())
        self.assertFalse(Parameter('mode', 'id\nres').isValid())
        self.assertFalse(Parameter(None, 'id_res').isValid())
        self.assertFalse(Parameter('mode', None).isValid())

    def test_equality(self):
        self.assertEqual(Parameter('a', 'b'), Parameter('a', 'b'))
        self.assertNotEqual(Parameter('a', 'b'), Parameter('a', 'c'))
        self.assertNotEqual(Parameter('a', 'b'), ('a', 'b'))


class ParameterListTest(unittest.TestCase):
    def test_empty(self):
        params = ParameterList()
        self.assertEqual(len(params), 0)
        self.assertEqual(params.getParameters(), [])
        self.assertIsNone(params.getParameter('mode'))
        self.assertIsNone(params.getParameterValue('mode'))
        self.assertFalse(params.hasParameter('mode'))

    def test_order(self):
        params = ParameterList.fromPairs([('z', '1'), ('a', '2'), ('m', '3')])
        self.assertEqual([p.key for p in params], ['z', 'a', 'm'])
        self.assertEqual(params.toPairs(), [('z', '1'), ('a', '2'), ('m', '3')])

    def test_replaceKeepsPosition(self):
        params = ParameterList.fromPairs([('z', '1'), ('a', '2')])
        params.set(Parameter('z', 'new'))
        self.assertEqual(params.toPairs(), [('z', 'new'), ('a', '2')])

    def test_duplicatePairs(self):
        params = ParameterList.fromPairs([('a', '1'), ('b', '2'), ('a', '3')])
        self.assertEqual(params.toPairs(), [('a', '3'), ('b', '2')])

    def test_lookup(self):
        params = ParameterList.fromMapping({'mode': 'id_res'})
        self.assertEqual(params.getParameter('mode'), Parameter('mode', 'id_res'))
        self.assertEqual(params.getParameterValue('mode'), 'id_res')
        self.assertTrue(params.hasParameter('mode'))
        self.assertIn('mode', params)
        self.assertNotIn('ns', params)

    def test_remove(self):
        params = ParameterList.fromPairs([('a', '1'), ('b', '2')])
        params.removeParameters('a')
        params.removeParameters('missing')
        self.assertEqual(params.toPairs(), [('b', '2')])

    def test_fromKVForm(self):
        params = ParameterList.fromKVForm('mode:id_res\nns.ext1:urn:test:ext\n')
        self.assertEqual(params.toPairs(), [('mode', 'id_res'), ('ns.ext1', 'urn:test:ext')])

    def test_equality(self):
        self.assertEqual(ParameterList.fromPairs([('a', '1')]), ParameterList.fromMapping({'a': '1'}))
        self.assertNotEqual(ParameterList.fromPairs([('a', '1'), ('b', '2')]),
                            ParameterList.fromPairs([('b', '2'), ('a', '1')]))


if __name__ == '__main__':
    unittest.main()
