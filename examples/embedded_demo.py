#!/usr/bin/env python3
"""
Embedded gowatch demo.

This example demonstrates:
1. Running the Watcher in a background thread
2. Editing a Go source file to trigger a rebuild and restart
3. Breaking the build (the loop keeps running) and fixing it again
4. Stopping the watcher from the main thread

Usage:
    python examples/embedded_demo.py

Requires the Go toolchain on PATH. The demo creates a throwaway module in
a temporary directory and cleans up after itself.
"""

import shutil
import sys
import tempfile
import threading
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.gowatch import GowatchConfig, Watcher
from src.cli import setup_logging


MAIN_GO = """package main

import (
\t"fmt"
\t"time"
)

func main() {
\tfor {
\t\tfmt.Println("%s")
\t\ttime.Sleep(time.Second)
\t}
}
"""


def write_main(project: Path, message: str) -> None:
    print(f"[DEMO] writing main.go: {message!r}")
    (project / "main.go").write_text(MAIN_GO % message)


def main() -> int:
    if shutil.which("go") is None:
        print("[DEMO] the go toolchain is not on PATH")
        return 1
    
    setup_logging()
    
    with tempfile.TemporaryDirectory() as tmp:
        project = Path(tmp) / "hello"
        project.mkdir()
        (project / "go.mod").write_text("module hello\n\ngo 1.21\n")
        write_main(project, "hello, v1")
        
        config = GowatchConfig(root_dir=project, ignore_patterns=["*_test.go"])
        watcher = Watcher(config)
        thread = threading.Thread(target=watcher.run, name="Watcher")
        thread.start()
        
        try:
            time.sleep(3)
            write_main(project, "hello, v2")
            time.sleep(3)
            
            print("[DEMO] breaking the build; the watcher keeps running")
            (project / "main.go").write_text("package main\n\nfunc main() {\n")
            time.sleep(3)
            
            write_main(project, "hello, v3 (fixed)")
            time.sleep(3)
            
            print("[DEMO] adding a package directory")
            (project / "internal").mkdir()
            time.sleep(1)
            print(f"[DEMO] watching {len(watcher.resource)} directories")
        finally:
            watcher.stop()
            thread.join(timeout=15)
    
    print("[DEMO] done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
