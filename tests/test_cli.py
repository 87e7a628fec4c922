import json
from unittest.mock import patch

from pubqa.cli.main import main
from pubqa.retrieval.vector_stores.supabase_store import VectorStoreError
from pubqa.utils.types import AnswerResult, SearchInfo


def test_prints_answer_json(capsys):
    result = AnswerResult(
        answer="No match.",
        sources=[],
        search_info=SearchInfo(articles_found=0, threshold=0.4, relevant_articles=0),
    )
    with patch("pubqa.pipelines.qa.QAPipeline") as pipeline_cls:
        pipeline_cls.return_value.answer.return_value = result
        exit_code = main(["Anything about zinc?", "--log-level", "WARNING"])

    assert exit_code == 0
    pipeline_cls.return_value.answer.assert_called_once_with("Anything about zinc?")
    assert json.loads(capsys.readouterr().out)["searchInfo"]["articlesFound"] == 0


def test_pipeline_error_exit_code(capsys):
    with patch("pubqa.pipelines.qa.QAPipeline") as pipeline_cls:
        pipeline_cls.return_value.answer.side_effect = VectorStoreError("Database error: boom", details="XX000")
        exit_code = main(["q", "--log-level", "WARNING"])

    body = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert body == {"error": "Database error: boom", "code": "RETRIEVAL_ERROR", "details": "XX000"}
