import asyncio
import logging
import unittest
from pathlib import Path
from unittest.mock import patch

import aiohttp

from judgeserver.engine import TestCase, YamlTestCaseStore, SupabaseTestCaseStore, TestCaseStoreInterface


class YamlStoreTest(unittest.TestCase):
    problems_dir = Path(__file__).parent.parent / 'resources' / 'problems'

    def setUp(self):
        self.logger = logging.Logger('test')
        self.logger.addHandler(logging.StreamHandler())
        self.store = YamlTestCaseStore(self.problems_dir, self.logger)

    def test_load(self):
        test_cases = asyncio.run(self.store.get_test_cases('echo'))
        self.assertEqual(test_cases, [
            TestCase(id='tc-hello', input='hello', expected_output='hello'),
            TestCase(id='tc-world', input='world', expected_output='world\n'),
        ])

    def test_default_ids_and_include(self):
        first, second = asyncio.run(self.store.get_test_cases('doubling'))
        self.assertEqual(first.id, '1')
        self.assertEqual(second.id, '2')
        self.assertEqual(second.input, '123456789\n')
        self.assertEqual(second.expected_output, '246913578\n')

    def test_empty(self):
        self.assertEqual(asyncio.run(self.store.get_test_cases('empty')), [])

    def test_missing_problem(self):
        self.assertRaises(TestCaseStoreInterface.ProblemNotFound, asyncio.run, self.store.get_test_cases('nope'))

    def test_invalid_problem_id(self):
        for problem_id in ['../problems/echo', 'echo.yaml', '', 'a/b']:
            with self.subTest(problem_id=problem_id):
                self.assertRaises(TestCaseStoreInterface.ProblemNotFound,
                                  asyncio.run, self.store.get_test_cases(problem_id))

    def test_broken_problem(self):
        with self.assertRaises(TestCaseStoreInterface.TestCaseStoreError) as cm:
            asyncio.run(self.store.get_test_cases('broken'))
        self.assertNotIsInstance(cm.exception, TestCaseStoreInterface.ProblemNotFound)

    def test_include_outside_problems_dir(self):
        self.assertRaises(TestCaseStoreInterface.TestCaseStoreError, asyncio.run, self.store.get_test_cases('escape'))


class SupabaseStoreTest(unittest.TestCase):

    class ResponseMock:

        def __init__(self, status: int, payload):
            self.status = status
            self.payload = payload

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            return False

        async def json(self):
            return self.payload

    def setUp(self):
        self.logger = logging.Logger('test')
        self.logger.addHandler(logging.StreamHandler())
        self.store = SupabaseTestCaseStore('https://db.example.com/', 'secret', self.logger)
        self.requests = []

    def mock_get(self, responses: dict):
        def get(session, url, params=None):
            self.requests.append((url, params))
            table = url.rsplit('/', 1)[-1]
            response = responses[table]
            if isinstance(response, Exception):
                raise response
            return response

        return patch.object(aiohttp.ClientSession, 'get', get)

    def test_load(self):
        responses = {
            'problems': self.ResponseMock(200, [{'id': 'p1'}]),
            'test_cases': self.ResponseMock(200, [
                {'id': 't1', 'input': '1', 'expected_output': '2'},
                {'id': 't2', 'input': '2', 'expected_output': '4'},
            ]),
        }
        with self.mock_get(responses):
            test_cases = asyncio.run(self.store.get_test_cases('p1'))
        self.assertEqual([t.id for t in test_cases], ['t1', 't2'])
        self.assertEqual(test_cases[1].expected_output, '4')

        url, params = self.requests[1]
        self.assertEqual(url, 'https://db.example.com/rest/v1/test_cases')
        self.assertEqual(params['problem_id'], 'eq.p1')
        self.assertEqual(params['order'], 'created_at.asc,id.asc')

    def test_missing_problem(self):
        for response in [self.ResponseMock(200, []), self.ResponseMock(400, {'code': '22P02'})]:
            with self.subTest(status=response.status), self.mock_get({'problems': response}):
                self.assertRaises(TestCaseStoreInterface.ProblemNotFound,
                                  asyncio.run, self.store.get_test_cases('p1'))

    def test_server_error(self):
        responses = {
            'problems': self.ResponseMock(200, [{'id': 'p1'}]),
            'test_cases': self.ResponseMock(500, {}),
        }
        with self.mock_get(responses):
            with self.assertRaises(TestCaseStoreInterface.TestCaseStoreError) as cm:
                asyncio.run(self.store.get_test_cases('p1'))
        self.assertNotIsInstance(cm.exception, TestCaseStoreInterface.ProblemNotFound)

    def test_connection_error(self):
        with self.mock_get({'problems': aiohttp.ClientConnectionError('refused')}):
            self.assertRaises(TestCaseStoreInterface.TestCaseStoreError,
                              asyncio.run, self.store.get_test_cases('p1'))


if __name__ == '__main__':
    unittest.main()
