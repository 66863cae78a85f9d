import logging
from pathlib import Path

from .engine import JudgeEngine, JudgeReport, TestCaseStoreInterface


class JudgeHandler:
    """Judges an uploaded program against the test cases of a problem."""

    def __init__(self,
                 engine: JudgeEngine,
                 store: TestCaseStoreInterface,
                 upload_dir: Path,
                 log: logging.Logger):
        self.engine = engine
        self.store = store
        self.upload_dir = upload_dir
        self.logger = log

    async def handle_submission(self, problem_id: str, source: bytes) -> JudgeReport:
        """
        Loads test cases of the problem and judges ``source`` against them.

        Store errors are not handled here - they mean the submission could not be judged at all.
        """
        try:
            test_cases = await self.store.get_test_cases(problem_id)
        except self.store.TestCaseStoreError as e:
            self.logger.error("Test cases of problem '%s' not loaded: %s", problem_id, str(e))
            raise
        self.logger.info("Found %s test cases for problem '%s'", len(test_cases), problem_id)

        report = await self.engine.judge_source(source, test_cases, self.upload_dir)
        self.logger.log(logging.INFO, "Submission for problem '%s' judged: %s", problem_id, report.score)
        return report
