#!/usr/bin/env python3
"""
Drift reconciliation between the notes table and the vector index.
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragnotes.core.config import (
    VALID_CORRECTION_MODES, VECTOR_PROVIDER, get_correction_mode, get_embedding_provider, get_vector_store
)
from ragnotes.core.dao import NoteRepository
from ragnotes.core.reconcile import reconcile
from ragnotes.vector.embeddings import EmbeddingService


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Detect and correct drift between notes and vector entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                     # Use CORRECTION_MODE (default: propose)
  %(prog)s --mode apply        # Re-embed missing vectors, remove orphans
  %(prog)s --mode propose --json
        """
    )
    parser.add_argument("--mode", choices=VALID_CORRECTION_MODES, default=None,
                        help="off, propose or apply (default: CORRECTION_MODE)")
    parser.add_argument("--db-path", help="SQLite file (default: DB_PATH)")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    args = parser.parse_args(argv)

    if VECTOR_PROVIDER == "memory":
        # stderr keeps --json output parseable
        print("WARNING: VECTOR_PROVIDER=memory; this run sees only a fresh in-process index "
              "and cannot correct the server's", file=sys.stderr)

    mode = args.mode or get_correction_mode()
    report = reconcile(
        NoteRepository(args.db_path),
        get_vector_store(),
        EmbeddingService(get_embedding_provider()),
        mode
    )

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return report

    if not report.findings:
        print("✅ No drift detected")
        return report

    print(f"⚠️  Found {len(report.findings)} drift issues")
    for finding in report.findings:
        print(f"  - {finding.type}: note {finding.record_id}")

    if mode == "off":
        print("📊 Correction mode=off, nothing applied")
    elif mode == "propose":
        print(f"📝 Correction mode=propose, {len(report.results)} corrections proposed")
    else:
        applied = sum(1 for r in report.results if r.action_taken)
        failed = [r for r in report.results if not r.success]
        print(f"🔧 Correction mode=apply, {applied} corrections applied")
        for result in failed:
            print(f"  ✗ {result.action_type} {result.record_id}: {result.error_message}")

    return report


if __name__ == "__main__":
    main()
