from text_al_pipeline.data.loader import (
    Corpus,
    CorpusConfig,
    documents_from_frame,
    load_corpus,
    parse_label,
)

__all__ = [
    "Corpus",
    "CorpusConfig",
    "documents_from_frame",
    "load_corpus",
    "parse_label",
]
