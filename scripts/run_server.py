#!/usr/bin/env python3
"""
Start the note store API with uvicorn.
"""

import argparse
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragnotes.core.config import validate_config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve the RAG Notes API")
    parser.add_argument("--host", default="127.0.0.1",
                        help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000,
                        help="Port to serve on (default: 8000)")
    parser.add_argument("--reload", action="store_true",
                        help="Reload on code changes")
    args = parser.parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        sys.exit(1)

    print(f"Starting RAG Notes API on http://{args.host}:{args.port}")
    uvicorn.run("ragnotes.api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
