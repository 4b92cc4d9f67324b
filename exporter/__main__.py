"""
Exporter 진입점

실행 방법:
    python -m exporter
"""

from exporter.cli import run

if __name__ == "__main__":
    run()
