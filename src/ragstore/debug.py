import json
from datetime import datetime
from pathlib import Path
from typing import Sequence, Union

from ragstore.domain.models import Document, ScoredDocument
from ragstore.utils.serialization import json_sanitize


def dump_retrieval(
    query: str,
    results: Sequence[Union[Document, ScoredDocument]],
    out_dir: str = "logs/retrieval",
    preview_chars: int = 600,
) -> str:
    """
    Dumps retrieval results to a timestamped JSON file in the output directory.

    Args:
        query (str): The query string.
        results: Documents, or ScoredDocuments when scores were requested.
        out_dir (str, optional): Output directory. Defaults to "logs/retrieval".
        preview_chars (int, optional): How much page content to keep per result.

    Returns:
        Path of the written file.
    """
    retrieved = []
    for rank, item in enumerate(results, start=1):
        doc = item.document if isinstance(item, ScoredDocument) else item
        retrieved.append({
            "rank": rank,
            "score": item.score if isinstance(item, ScoredDocument) else None,
            "metadata": doc.metadata,
            "text_preview": doc.page_content[:preview_chars],
        })

    Path(out_dir).mkdir(parents=True, exist_ok=True)
    time_string = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    path = Path(out_dir) / f"{time_string}.json"
    payload = {
        "query": query,
        "retrieved": retrieved,
    }
    path.write_text(json.dumps(json_sanitize(payload), indent=2, ensure_ascii=False), encoding="utf-8")
    return str(path)
