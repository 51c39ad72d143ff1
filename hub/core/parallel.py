import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


def fetch_all(tasks: Dict[str, Callable[[], Any]], default: Callable[[], Any] = list) -> Tuple[Dict[str, Any], List[str]]:
    """Run independent read tasks in threads.

    A failing task gets `default()` as its result and its name in the
    returned failure list; the others are unaffected.
    """
    results: Dict[str, Any] = {}
    failed: List[str] = []
    if not tasks:
        return results, failed
    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(tasks))) as pool:
        future_to_name = {pool.submit(task): name for name, task in tasks.items()}
        for future in as_completed(future_to_name):
            name = future_to_name[future]
            try:
                results[name] = future.result()
            except Exception as e:
                logger.warning(f"Parallel fetch of {name} failed: {e}")
                results[name] = default()
                failed.append(name)
    logger.debug(f"Parallel fetch finished: {len(tasks) - len(failed)} ok, {len(failed)} failed")
    return results, sorted(failed)
