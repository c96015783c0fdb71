from __future__ import annotations

from pdfmail.ingest.aggregator import DocumentStatus, EmailAggregator


def test_aggregator_folds_and_deduplicates() -> None:
    aggregator = EmailAggregator()

    result = aggregator.add("contact.pdf", ["alice@Example.COM", "INFO@example.com", "ALICE@example.com"])

    assert result.addresses == ["alice@example.com", "info@example.com"]
    assert result.count == 2
    assert result.status is DocumentStatus.FOUND


def test_per_file_results_keep_first_occurrence_order() -> None:
    aggregator = EmailAggregator()

    result = aggregator.add("doc.pdf", ["zed@z.org", "amy@a.org", "Zed@Z.org"])

    assert result.addresses == ["zed@z.org", "amy@a.org"]
    assert aggregator.result().addresses == ["amy@a.org", "zed@z.org"]


def test_batch_result_is_sorted_union() -> None:
    aggregator = EmailAggregator()
    aggregator.add("one.pdf", ["b@x.com", "a@x.com"])
    aggregator.add("two.pdf", ["C@x.com", "b@x.com"])
    aggregator.add("three.pdf", [])

    batch = aggregator.result()

    union = set()
    for item in batch.files:
        union.update(item.addresses)
    assert batch.addresses == sorted(union) == ["a@x.com", "b@x.com", "c@x.com"]
    assert batch.files_attempted == 3
    assert batch.files_with_addresses == 2
    assert batch.files[2].status is DocumentStatus.EMPTY


def test_batch_result_independent_of_file_order() -> None:
    documents = [
        ("one.pdf", ["Mia@b.de", "leo@a.de"]),
        ("two.pdf", ["leo@a.de", "ann@c.de"]),
        ("three.pdf", ["zoe@d.de"]),
    ]
    forward = EmailAggregator()
    backward = EmailAggregator()
    for name, candidates in documents:
        forward.add(name, candidates)
    for name, candidates in reversed(documents):
        backward.add(name, candidates)

    assert forward.result().addresses == backward.result().addresses


def test_sort_uses_code_point_order() -> None:
    aggregator = EmailAggregator()
    aggregator.add("doc.pdf", ["b@x.com", "_a@x.com", "1a@x.com", "a.b@x.com"])

    assert aggregator.result().addresses == ["1a@x.com", "_a@x.com", "a.b@x.com", "b@x.com"]


def test_failed_document_is_distinguished_from_empty() -> None:
    aggregator = EmailAggregator()

    failed = aggregator.add("broken.pdf", [], error="PDFSyntaxError: No /Root object!")
    empty = aggregator.add("blank.pdf", [])

    assert failed.status is DocumentStatus.FAILED
    assert failed.error
    assert empty.status is DocumentStatus.EMPTY
    assert aggregator.result().files_failed == 1
    assert aggregator.result().addresses == []
