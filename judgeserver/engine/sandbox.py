"""Isolated execution of submitted programs."""
import asyncio
import logging
import os
import signal
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class StateError(Exception):
    pass


class ExecutionState(Enum):
    SPAWNING = 0
    RUNNING = 1
    COMPLETED = 2
    TIMED_OUT = 3
    SPAWN_FAILED = -1


@dataclass(frozen=True)
class Outcome:
    """What a finished (or killed) execution left behind."""
    state: ExecutionState
    exit_code: Optional[int] = None
    stdout: str = ''
    stderr: str = ''


def _decode(raw: Optional[bytes]) -> str:
    if not raw:
        return ''
    return raw.decode('utf-8', errors='replace')


class ExecutionHandle:
    """Single run of a program: the child process, its pipe reader and its state."""

    def __init__(self, program: Path, logger: logging.Logger):
        self.program = program
        self.logger = logger
        self.state: ExecutionState = ExecutionState.SPAWNING
        self.process: Optional[asyncio.subprocess.Process] = None
        self.io_task: Optional[asyncio.Task] = None

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    @property
    def name(self) -> str:
        return f'{self.program.name}[{self.pid}]'

    def change_state(self, new_state: ExecutionState, requires: ExecutionState | list[ExecutionState] | None):
        if requires is not None:
            try:
                self.requires(requires)
            except StateError:
                msg = ("Illegal state change of execution '%s': %s -> %s (%s allowed)"
                       % (self.name, self.state.name, new_state.name, requires))
                self.logger.error(msg)
                raise StateError(msg)
        self.logger.debug("State of execution '%s': %s -> %s",
                          self.name, self.state.name, new_state.name)
        self.state = new_state

    def requires(self, states: ExecutionState | list[ExecutionState]):
        if isinstance(states, ExecutionState):
            states = [states]
        if self.state not in states:
            raise StateError(f"Any of {states} is required, but state is {self.state}")


class SandboxInterface(ABC):
    """Interface for running a program in isolation from the judge."""

    class LaunchError(Exception):
        pass

    @abstractmethod
    async def start(self, program: Path, stdin: bytes) -> ExecutionHandle:
        """Spawns the program, feeds it ``stdin`` and closes its input."""
        pass

    @abstractmethod
    async def await_result(self, handle: ExecutionHandle, timeout: float) -> Outcome:
        """Waits at most ``timeout`` seconds for the program to finish."""
        pass

    @abstractmethod
    async def kill(self, handle: ExecutionHandle):
        """Forcibly terminates and reaps the program."""
        pass


class ProcessSandbox(SandboxInterface):
    """Runs every program as a separate OS process of the given interpreter."""

    def __init__(self, interpreter: str, logger: logging.Logger):
        self.interpreter = interpreter
        self.logger = logger
        # own process group, so that children spawned by the program die with it
        self._new_session = not sys.platform.startswith('win')

    async def start(self, program: Path, stdin: bytes) -> ExecutionHandle:
        handle = ExecutionHandle(program, self.logger)
        try:
            handle.process = await asyncio.create_subprocess_exec(
                self.interpreter, str(program),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=self._new_session
            )
        except OSError as e:
            handle.change_state(ExecutionState.SPAWN_FAILED, requires=ExecutionState.SPAWNING)
            raise self.LaunchError(str(e)) from e

        handle.change_state(ExecutionState.RUNNING, requires=ExecutionState.SPAWNING)
        # communicate() writes stdin, closes it and collects both output pipes
        handle.io_task = asyncio.create_task(handle.process.communicate(stdin),
                                             name=f'io-{handle.pid}')
        return handle

    async def await_result(self, handle: ExecutionHandle, timeout: float) -> Outcome:
        handle.requires(ExecutionState.RUNNING)
        try:
            stdout, stderr = await asyncio.wait_for(asyncio.shield(handle.io_task), timeout=timeout)
        except asyncio.TimeoutError:
            await self.kill(handle)
            handle.change_state(ExecutionState.TIMED_OUT, requires=ExecutionState.RUNNING)
            return Outcome(ExecutionState.TIMED_OUT)

        if self._new_session:
            # children that closed their pipes outlive the program otherwise
            self._kill_group(handle.process)
        handle.change_state(ExecutionState.COMPLETED, requires=ExecutionState.RUNNING)
        return Outcome(ExecutionState.COMPLETED,
                       exit_code=handle.process.returncode,
                       stdout=_decode(stdout),
                       stderr=_decode(stderr))

    async def kill(self, handle: ExecutionHandle):
        process = handle.process
        if process is None:
            return
        if self._new_session:
            self._kill_group(process)
        elif process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # already gone
        await process.wait()

        if handle.io_task is not None and not handle.io_task.done():
            handle.io_task.cancel()
            await asyncio.gather(handle.io_task, return_exceptions=True)
        self.logger.info("Execution '%s' killed (exit code %s)", handle.name, process.returncode)

    @staticmethod
    def _kill_group(process: asyncio.subprocess.Process):
        """SIGKILLs every process left in the session of ``process``."""
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass  # nothing left in the group
        except PermissionError:
            # macOS refuses to signal a group whose leader is a zombie
            if process.returncode is None:
                process.kill()
