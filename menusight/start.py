#!/usr/bin/env python3
"""
MenuSight - Start the console API
Run: python start.py [port]
"""

import os
import socket
import subprocess
import sys
from pathlib import Path


# Colors for terminal output
class Colors:
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    WHITE = '\033[97m'
    RESET = '\033[0m'


def print_colored(message, color=Colors.WHITE):
    """Print colored message"""
    print(f"{color}{message}{Colors.RESET}")


def port_in_use(port):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        return sock.connect_ex(('127.0.0.1', port)) == 0
    finally:
        sock.close()


def pick_port(port):
    """First free port starting at port (tries ten)."""
    for candidate in range(port, port + 10):
        if not port_in_use(candidate):
            return candidate
        print_colored(f"⚠️  Port {candidate} is in use, trying {candidate + 1}...", Colors.YELLOW)
    raise RuntimeError(f"No free port between {port} and {port + 9}")


def start_backend(project_root, port):
    """Run uvicorn for menusight.main:app from backend/"""
    backend_dir = project_root / "backend"
    env = os.environ.copy()
    env["PYTHONPATH"] = str(backend_dir)
    if not (backend_dir / ".env").exists() and not (project_root / ".env").exists():
        print_colored("⚠️  No .env found; BACKOFFICE_API_URL defaults to http://localhost:5000/api", Colors.YELLOW)

    cmd = [
        sys.executable,
        "-m", "uvicorn",
        "menusight.main:app",
        "--host", "0.0.0.0",
        "--port", str(port),
        "--reload",
    ]
    return subprocess.Popen(cmd, cwd=str(backend_dir), env=env, stdout=None, stderr=subprocess.STDOUT)


def main():
    print_colored("🚀 Starting MenuSight API", Colors.GREEN)
    print_colored("=" * 50, Colors.GREEN)

    project_root = Path(__file__).resolve().parent
    requested = int(sys.argv[1]) if len(sys.argv) > 1 else 8000
    try:
        port = pick_port(requested)
    except RuntimeError as e:
        print_colored(f"❌ {e}", Colors.RED)
        sys.exit(1)

    proc = start_backend(project_root, port)
    print()
    print_colored("📍 URLs:", Colors.CYAN)
    print_colored(f"   API:            http://localhost:{port}/api", Colors.WHITE)
    print_colored(f"   Health Check:   http://localhost:{port}/health", Colors.WHITE)
    print_colored("   API Docs:       /docs (when DEBUG=true)", Colors.WHITE)
    print_colored("💡 Press Ctrl+C to stop", Colors.YELLOW)

    try:
        proc.wait()
    except KeyboardInterrupt:
        print()
        print_colored("🛑 Stopping server...", Colors.YELLOW)
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
        print_colored("✅ Server stopped", Colors.GREEN)
    if proc.returncode not in (0, None, -15):
        print_colored(f"⚠️  Server exited with code {proc.returncode}", Colors.RED)
        sys.exit(proc.returncode)


if __name__ == "__main__":
    main()
