import pytest
import torch

from blurbnet import (EncoderConfig, InvalidConfiguration, SequenceEncoder,
                      UnfitVocabulary, Vocabulary, VocabularyFrozen, pad_sequences)

CORPUS = ["hello there", "Hello there, you!", "I love you very much"]


def fitted(**kw) -> SequenceEncoder:
    return SequenceEncoder(EncoderConfig(**kw)).fit(CORPUS)


def test_defaults():
    cfg = EncoderConfig()
    assert (cfg.max_len, cfg.padding, cfg.truncating) == (100, "pre", "pre")


@pytest.mark.parametrize("kw", [
    {"max_len": 0}, {"max_len": -1}, {"num_words": 0},
    {"padding": "middle"}, {"truncating": "both"},
    {"max_len": 2.5}, {"max_len": True}, {"num_words": "100"}, {"num_words": 1e3},
])
def test_invalid_configuration(kw):
    with pytest.raises(InvalidConfiguration):
        EncoderConfig(**kw)


def test_encode_before_fit_fails():
    enc = SequenceEncoder(EncoderConfig(max_len=4))
    assert not enc.fitted
    with pytest.raises(UnfitVocabulary):
        enc.encode(["hello"])


def test_fit_twice_is_refused():
    enc = fitted(max_len=4)
    with pytest.raises(VocabularyFrozen):
        enc.fit(["something else entirely"])


def test_worked_example_pre_pre():
    enc = fitted(max_len=6, padding="pre", truncating="pre")
    assert enc.encode(["I love you very much"]).tolist() == [[0, 4, 5, 3, 6, 7]]
    assert enc.encode_one("I love you very much") == [0, 4, 5, 3, 6, 7]


def test_every_row_has_length_L():
    docs = ["", "hello", "i love you very much hello there you i love", "zebra"]
    for L in (1, 3, 6, 20):
        for padding in ("pre", "post"):
            for truncating in ("pre", "post"):
                out = fitted(max_len=L, padding=padding, truncating=truncating).encode(docs)
                assert out.shape == (len(docs), L)
                assert out.dtype == torch.long


def test_exact_length_post_post_has_no_padding():
    enc = fitted(max_len=5, padding="post", truncating="post")
    assert enc.encode(["i love you very much"]).tolist() == [[4, 5, 3, 6, 7]]


def test_truncation_sides():
    doc = ["i love you very much hello there"]  # 4 5 3 6 7 1 2
    assert fitted(max_len=3, truncating="pre").encode(doc).tolist() == [[7, 1, 2]]
    assert fitted(max_len=3, truncating="post").encode(doc).tolist() == [[4, 5, 3]]


def test_encoding_is_idempotent():
    enc = fitted(max_len=6)
    docs = ["hello you", "very much love"]
    assert torch.equal(enc.encode(docs), enc.encode(docs))


@pytest.mark.parametrize("truncating", ["pre", "post"])
def test_post_padding_aligns_first_token_at_column_zero(truncating):
    enc = fitted(max_len=6, padding="post", truncating=truncating)
    docs = ["you", "hello there you", "i love you very much hello there you"]
    out = enc.encode(docs)
    for doc, row in zip(docs, out.tolist()):
        retained = enc.texts_to_sequences([doc])[0]
        retained = retained[-6:] if truncating == "pre" else retained[:6]
        assert row[0] == retained[0]


def test_pre_padding_post_truncating_misaligns_first_token():
    enc = fitted(max_len=6, padding="pre", truncating="post")
    short, long = enc.encode(["hello there", "i love you very much hello there you"]).tolist()
    assert short == [0, 0, 0, 0, 1, 2]
    assert long == [4, 5, 3, 6, 7, 1]
    first_col = [next(i for i, v in enumerate(r) if v) for r in (short, long)]
    assert first_col == [4, 0]


@pytest.mark.parametrize("padding", ["pre", "post"])
def test_out_of_vocabulary_document_is_all_padding(padding):
    enc = fitted(max_len=4, padding=padding)
    assert enc.encode(["zebra quokka!", ""]).tolist() == [[0, 0, 0, 0], [0, 0, 0, 0]]


def test_oov_tokens_are_dropped_not_replaced():
    enc = fitted(max_len=4, padding="post")
    assert enc.encode(["hello zebra there"]).tolist() == [[1, 2, 0, 0]]


def test_vocabulary_is_reused_for_new_documents():
    enc = fitted(max_len=4, num_words=2)
    assert len(enc.vocabulary) == 2
    assert enc.encode(["you hello there"]).tolist() == [[0, 0, 1, 2]]


def test_single_string_is_rejected():
    with pytest.raises(InvalidConfiguration):
        fitted(max_len=4).encode("hello there")


def test_fit_rejects_a_single_string():
    with pytest.raises(InvalidConfiguration):
        SequenceEncoder(EncoderConfig(max_len=4)).fit("hello there")
    with pytest.raises(InvalidConfiguration):
        Vocabulary.fit("hello there", num_words=10)


def test_pad_sequences_directly():
    out = pad_sequences([[1, 2, 3], [4]], maxlen=2, padding="post", truncating="post", value=9)
    assert out.tolist() == [[1, 2], [4, 9]]
    assert pad_sequences([], maxlen=5).shape == (0, 5)
    with pytest.raises(InvalidConfiguration):
        pad_sequences([[1]], maxlen=0)
    with pytest.raises(InvalidConfiguration):
        pad_sequences([[1]], maxlen=1.5)
