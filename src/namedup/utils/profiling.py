"""cProfile support for namedup.

Setting NAMEDUP_PROFILE to a directory makes every wrapped call dump its profile into
a per-session subdirectory named {timestamp_ms}_{main_pid}. Worker processes find the
session through _NAMEDUP_PROFILE_SESSION, which the main entry point exports before the
pool is created.
"""
import cProfile
import functools
import itertools
import os
import time
from pathlib import Path
from typing import Callable, TypeVar, ParamSpec

P = ParamSpec('P')
T = TypeVar('T')

PROFILE_ENV = 'NAMEDUP_PROFILE'
SESSION_ENV = '_NAMEDUP_PROFILE_SESSION'

_sequence = itertools.count()


def get_profile_dir() -> Path | None:
    """Return the directory profiles of this session go to, or None when profiling is off."""
    base = os.environ.get(PROFILE_ENV)
    if not base:
        return None

    session = os.environ.get(SESSION_ENV)
    if not session:
        session = f"{int(time.time() * 1000)}_{os.getpid()}"
    return Path(base) / session


def generate_profile_filename(prefix: str) -> str:
    return f"{prefix}_{os.getpid()}_{next(_sequence)}.prof"


def profile_function(func: Callable[P, T], prefix: str = "profile") -> Callable[P, T]:
    """Wrap func so that each call is profiled when NAMEDUP_PROFILE is set."""
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        profile_dir = get_profile_dir()
        if profile_dir is None:
            return func(*args, **kwargs)

        profile_dir.mkdir(parents=True, exist_ok=True)
        profiler = cProfile.Profile()
        try:
            profiler.enable()
            return func(*args, **kwargs)
        finally:
            profiler.disable()
            profiler.dump_stats(str(profile_dir / generate_profile_filename(prefix)))

    return wrapper


def profile_main(func: Callable[P, T]) -> Callable[P, T]:
    """Profile the entry point and pin the session directory for worker processes."""
    profiled = profile_function(func, prefix="main")

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        if os.environ.get(PROFILE_ENV) and not os.environ.get(SESSION_ENV):
            os.environ[SESSION_ENV] = f"{int(time.time() * 1000)}_{os.getpid()}"
        return profiled(*args, **kwargs)

    return wrapper


def profile_worker(func: Callable[P, T]) -> Callable[P, T]:
    return profile_function(func, prefix="worker")
