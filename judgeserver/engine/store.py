"""Module for loading test cases of problems."""
import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

import aiohttp
import yaml

from .results import TestCase
from .yaml_tags import Include, get_loader

PROBLEM_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')


class TestCaseStoreInterface(ABC):
    """Interface for the storage that owns problems and their test cases."""
    __test__ = False

    class TestCaseStoreError(Exception):
        pass

    class ProblemNotFound(TestCaseStoreError):
        pass

    @abstractmethod
    async def get_test_cases(self, problem_id: str) -> list[TestCase]:
        """Returns the ordered test cases of a problem."""
        pass


class YamlTestCaseStore(TestCaseStoreInterface):
    """Problems kept as ``<problems_dir>/<problem_id>.yaml`` files."""

    def __init__(self, problems_dir: Path, logger: logging.Logger):
        self.problems_dir = problems_dir
        self.logger = logger

    def problem_file(self, problem_id: str) -> Path:
        if not PROBLEM_ID_PATTERN.match(problem_id):
            raise self.ProblemNotFound(f"Invalid problem id '{problem_id}'")
        return self.problems_dir / f'{problem_id}.yaml'

    async def get_test_cases(self, problem_id: str) -> list[TestCase]:
        path = self.problem_file(problem_id)
        if not path.is_file():
            raise self.ProblemNotFound(f"Problem '{problem_id}' does not exist")
        try:
            return await asyncio.to_thread(self._load, path)
        except (OSError, ValueError, KeyError, TypeError, AttributeError, yaml.YAMLError) as e:
            self.logger.error("Cannot load test cases from '%s': %s", path, e)
            raise self.TestCaseStoreError(f"Cannot load test cases of problem '{problem_id}'") from e

    def _load(self, path: Path) -> list[TestCase]:
        with open(path, encoding='utf-8') as f:
            content: dict = yaml.load(f, Loader=get_loader())
        if not content:
            return []
        test_cases = []
        for idx, raw in enumerate(content.get('test_cases') or [], 1):
            test_cases.append(TestCase(
                id=str(raw.get('id', idx)),
                input=self._text(raw['input']),
                expected_output=self._text(raw['expected_output']),
            ))
        return test_cases

    def _text(self, value) -> str:
        if isinstance(value, Include):
            return value.read(self.problems_dir)
        if value is None:
            return ''
        return str(value)


class SupabaseTestCaseStore(TestCaseStoreInterface):
    """Test cases read from the platform database through its REST interface."""

    def __init__(self, url: str, service_key: str, logger: logging.Logger, timeout: float = 10):
        self.rest_url = url.rstrip('/') + '/rest/v1'
        self.service_key = service_key
        self.logger = logger
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def headers(self) -> dict[str, str]:
        return {
            'apikey': self.service_key,
            'Authorization': f'Bearer {self.service_key}',
            'Accept': 'application/json',
        }

    async def get_test_cases(self, problem_id: str) -> list[TestCase]:
        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
                problems = await self._select(session, 'problems', {
                    'select': 'id',
                    'id': f'eq.{problem_id}',
                })
                if not problems:
                    raise self.ProblemNotFound(f"Problem '{problem_id}' does not exist")
                rows = await self._select(session, 'test_cases', {
                    'select': 'id,input,expected_output',
                    'problem_id': f'eq.{problem_id}',
                    'order': 'created_at.asc,id.asc',
                })
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Cannot fetch test cases of problem '%s': %s", problem_id, e)
            raise self.TestCaseStoreError("Cannot communicate with the database.") from e

        return [TestCase(id=str(row['id']), input=row['input'], expected_output=row['expected_output'])
                for row in rows]

    async def _select(self, session: aiohttp.ClientSession, table: str, params: dict[str, str]) -> list[dict]:
        async with session.get(f'{self.rest_url}/{table}', params=params) as response:
            if response.status == 400 and table == 'problems':
                # malformed identifier, e.g. not a uuid
                return []
            if response.status != 200:
                raise self.TestCaseStoreError(f"Failed to fetch {table}. Status code: {response.status}")
            return await response.json()
