#!/usr/bin/env python3
"""
Sample Documents for search tests

Small plain-text documents covering the built-in concepts, plus a helper
that loads them into a pipeline.

Usage:
    python -m tests.fixtures.sample_documents --output data/sample_documents.json
"""

import json
from pathlib import Path
from typing import Any, Dict, List

# =============================================================================
# Sample Documents
# =============================================================================

SAMPLE_DOCUMENTS: List[Dict[str, Any]] = [
    {
        "id": "groceries",
        "filename": "groceries.txt",
        "fileType": "txt",
        "extractedText": "I love fresh apples and bananas. The market sells grapes too.",
        "metadata": {"title": "Groceries", "author": "Sam"},
    },
    {
        "id": "quarterly",
        "filename": "Quarterly_Report.pdf",
        "fileType": "pdf",
        "extractedText": "revenue is up",
        "metadata": {"title": "Quarterly Report", "pages": 12},
    },
    {
        "id": "pets",
        "filename": "pets.docx",
        "fileType": "docx",
        "extractedText": "Our dog chases the cat. The bird sings every morning.",
        "metadata": {},
    },
    {
        "id": "startup",
        "filename": "startup_plan.pptx",
        "fileType": "pptx",
        "extractedText": (
            "The startup builds software for every company. "
            "Our website launches next month. Marketing is planned."
        ),
        "metadata": {"title": "Startup Plan"},
    },
    {
        "id": "empty",
        "filename": "blank.csv",
        "fileType": "csv",
        "extractedText": "",
        "metadata": {},
    },
]


def load_into(pipeline, documents=None):
    """Upload sample documents into a pipeline; returns the UploadResults."""
    from search.models import UploadRequest

    documents = SAMPLE_DOCUMENTS if documents is None else documents
    return pipeline.upload_batch(UploadRequest.from_dict(d) for d in documents)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Write sample upload payloads as JSON")
    parser.add_argument("--output", "-o", default="data/sample_documents.json")
    args = parser.parse_args()

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(SAMPLE_DOCUMENTS, indent=2))
    print(f"Wrote {len(SAMPLE_DOCUMENTS)} documents to {output}")
