#!/usr/bin/env python3
"""Supervisor that runs the Alfajr bot with values from .env and restarts it on crashes."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

ROOT = Path(__file__).resolve().parents[1]
ENV_FILE = ROOT / ".env"
LOG_DIR = ROOT / "logs"
REQUIRED_ENV = ("ALFAJR_BOT_TOKEN", "TELEGRAM_BOT_TOKEN")


def load_env_values(path: Path) -> Dict[str, str]:
    """Parse .env if it exists, otherwise fall back to already-exported env vars."""

    env: Dict[str, str] = dict(os.environ)
    if not path.exists():
        print(f"[i] {path} not found; relying on existing environment variables.")
        return env

    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        env[key.strip()] = value.strip().strip("\"' ")
    return env


@dataclass(slots=True)
class BotRunner:
    command: List[str]
    cwd: Path
    log_path: Path
    process: Optional[subprocess.Popen] = None
    log_handle: Optional[object] = None

    def start(self, env_values: Dict[str, str]) -> None:
        if not any(env_values.get(name) for name in REQUIRED_ENV):
            raise RuntimeError(f"Missing one of: {', '.join(REQUIRED_ENV)}")

        env = dict(env_values)
        env.setdefault("ALFAJR_DATA_DIR", str((ROOT / "alfajr_data").resolve()))

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_handle = self.log_path.open("ab", buffering=0)
        self.log_handle.write(b"\n\n==== Starting Alfajr ====\n")
        self.process = subprocess.Popen(
            self.command,
            cwd=self.cwd,
            env=env,
            stdout=self.log_handle,
            stderr=subprocess.STDOUT,
        )
        print(f"[+] Alfajr (pid {self.process.pid}), log: {self.log_path}")

    def stop(self, timeout: float = 10.0) -> None:
        if not self.process or self.process.poll() is not None:
            self._close_log()
            return
        print("[-] Stopping Alfajr…")
        self.process.terminate()
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            print("[!] Alfajr did not exit; killing.")
            self.process.kill()
        finally:
            self._close_log()

    def check_alive(self) -> Optional[int]:
        if not self.process:
            return None
        return self.process.poll()

    def _close_log(self) -> None:
        if self.log_handle:
            try:
                self.log_handle.flush()
                self.log_handle.close()
            except OSError:
                pass
            self.log_handle = None


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Alfajr bot under supervision.")
    parser.add_argument(
        "--max-restarts",
        type=int,
        default=5,
        help="Give up after this many crashes in a row (default: 5).",
    )
    parser.add_argument(
        "--restart-delay",
        type=float,
        default=5.0,
        help="Seconds to wait before restarting a crashed bot.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    env_values = load_env_values(ENV_FILE)
    runner = BotRunner(
        command=[sys.executable, "-m", "alfajr.bot"],
        cwd=ROOT / "bots",
        log_path=LOG_DIR / "alfajr.log",
    )

    try:
        runner.start(env_values)
    except RuntimeError as exc:
        print(f"[!] Failed to start Alfajr: {exc}", file=sys.stderr)
        sys.exit(1)

    restarts = 0
    try:
        while True:
            code = runner.check_alive()
            if code is not None:
                runner.stop()
                if code == 0:
                    print("[i] Alfajr exited cleanly.")
                    return
                restarts += 1
                if restarts > args.max_restarts:
                    print(f"[!] Alfajr crashed {restarts} times; check {runner.log_path}.")
                    sys.exit(code)
                print(f"[!] Alfajr exited with status {code}; restarting in {args.restart_delay:.0f}s.")
                time.sleep(args.restart_delay)
                runner.start(env_values)
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\nStopping Alfajr…")
        runner.stop()
        print("Goodbye!")


if __name__ == "__main__":
    main()
