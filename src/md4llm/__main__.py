"""Allow running md4llm as ``python -m md4llm``."""

from md4llm.cli import app

if __name__ == "__main__":
    app()
