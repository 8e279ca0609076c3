"""
Process tree cleanup for long-running watcher subprocesses.

fswatch, inotifywait and the watchman client may spawn helpers of their
own; the whole tree is terminated when a backend shuts down.
"""

import logging
import subprocess

import psutil

TERMINATE_TIMEOUT = 3


def terminate_process_tree(proc: subprocess.Popen, timeout: float = TERMINATE_TIMEOUT) -> int:
    """Terminate a subprocess and all of its children.

    Children are terminated before the parent. Processes that ignore
    SIGTERM are force killed after the timeout.

    Args:
        proc: Process started with subprocess.Popen
        timeout: Seconds to wait for graceful termination

    Returns:
        Number of processes signalled
    """
    if proc.poll() is not None:
        return 0

    try:
        root = psutil.Process(proc.pid)
        processes = root.children(recursive=True)
        processes.reverse()
        processes.append(root)
    except psutil.NoSuchProcess:
        return 0

    killed_count = 0
    for p in processes:
        try:
            p.terminate()
            killed_count += 1
        except psutil.NoSuchProcess:
            pass  # Already dead
        except psutil.AccessDenied as e:
            logging.warning(f"Failed to terminate process {p.pid}: {e}")

    _gone, alive = psutil.wait_procs(processes, timeout=timeout)

    for p in alive:
        try:
            p.kill()
            logging.warning(f"Force killed stubborn process {p.pid}")
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            logging.warning(f"Failed to force kill process {p.pid}: {e}")

    # Reap the Popen handle so no zombie is left behind
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logging.warning(f"Process {proc.pid} did not exit after kill")

    return killed_count
