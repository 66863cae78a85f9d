from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
import settings

from .engine import JudgeEngine, ProcessSandbox, YamlTestCaseStore, SupabaseTestCaseStore, TestCaseStoreInterface
from .handlers import JudgeHandler
from .logger import LoggerManager


# APP ===================================================================================


logger_manager = LoggerManager.from_settings(__name__)
logger_manager.start()
logger = logger_manager.logger

sandbox = ProcessSandbox(
    interpreter=settings.JUDGE_INTERPRETER,
    logger=logger
)

engine = JudgeEngine(
    sandbox=sandbox,
    logger=logger,
    timeout_ms=settings.JUDGE_TIMEOUT_MS,
    max_workers=settings.JUDGE_MAX_WORKERS
)

if settings.TEST_CASE_SOURCE == 'supabase':
    store = SupabaseTestCaseStore(
        url=settings.SUPABASE_URL,
        service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
        logger=logger
    )
else:
    store = YamlTestCaseStore(
        problems_dir=settings.PROBLEMS_DIR,
        logger=logger
    )

handler = JudgeHandler(engine, store, settings.UPLOAD_DIR, logger)


@asynccontextmanager
async def lifespan(app_: FastAPI):
    logger.info("Judge started (test cases from '%s')", settings.TEST_CASE_SOURCE)

    yield

    # stop logger
    logger_manager.stop()


app = FastAPI(title='Judge', lifespan=lifespan)


# VIEWS =================================================================================


@app.get("/")
async def root():
    return {"message": "Judge is running"}


@app.post("/judge")
async def judge_post(code: UploadFile = File(...), problem_id: str = Form(..., alias='problemId')):
    """Judge uploaded program against test cases of a problem"""
    source = await code.read(settings.MAX_PROGRAM_SIZE + 1)
    if not source:
        raise HTTPException(status_code=400, detail="Missing code file or problem ID")
    if len(source) > settings.MAX_PROGRAM_SIZE:
        raise HTTPException(status_code=413, detail="Code file too large")

    try:
        report = await handler.handle_submission(problem_id, source)
    except TestCaseStoreInterface.ProblemNotFound:
        raise HTTPException(status_code=404, detail="Problem not found")
    except TestCaseStoreInterface.TestCaseStoreError:
        raise HTTPException(status_code=500, detail="Failed to fetch test cases")

    return report.to_dict()
