"""
BM25 打分器单元测试
基于内存索引验证公式、单调性、长度归一化、退化输入和排序稳定性
"""

import math

import pytest

from jobrank.search.bm25 import (
    BM25Scorer,
    bm25_term_score,
    inverse_document_frequency,
    rank,
)
from jobrank.search.store import InMemoryIndexStore


def build_store(documents):
    """documents: {document_id: {term: freq}}"""
    store = InMemoryIndexStore()
    for document_id, term_freqs in documents.items():
        store.replace(document_id, term_freqs, sum(term_freqs.values()))
    store.recompute_doc_frequencies()
    return store


class TestFormula:
    """测试打分公式"""

    def test_term_score_matches_formula(self):
        """测试单项得分与手算公式一致"""
        k1, b = 1.2, 0.75
        tf, dl, df, n, avgdl = 2, 10, 1, 3, 8.0

        idf = math.log((n - df + 0.5) / (df + 0.5) + 1)
        expected = idf * (tf * (k1 + 1)) / (tf + k1 * (1 - b + b * dl / avgdl))

        assert bm25_term_score(tf, dl, df, n, avgdl, k1, b) == pytest.approx(expected)

    @pytest.mark.parametrize("doc_freq,total_docs", [(0, 0), (1, 1), (5, 3), (-2, 4), (10, 10)])
    def test_idf_is_positive_and_finite(self, doc_freq, total_docs):
        """测试 IDF 在任何输入下都是正的有限值（df 超过 N 或为负时截断）"""
        idf = inverse_document_frequency(doc_freq, total_docs)
        assert idf > 0
        assert math.isfinite(idf)

    def test_monotonic_in_term_frequency(self):
        """测试其他条件相同时词频越高得分越高"""
        scores = [bm25_term_score(tf, 10, 2, 10, 10.0) for tf in range(1, 6)]
        assert scores == sorted(scores)
        assert len(set(scores)) == len(scores)

    def test_length_normalization(self):
        """测试 b > 0 时同词频下短文档得分更高"""
        short = bm25_term_score(2, 5, 2, 10, 10.0, b=0.75)
        long = bm25_term_score(2, 40, 2, 10, 10.0, b=0.75)
        assert short > long

    def test_no_length_normalization_when_b_is_zero(self):
        """测试 b == 0 时文档长度不影响得分"""
        assert bm25_term_score(2, 5, 2, 10, 10.0, b=0) == pytest.approx(
            bm25_term_score(2, 40, 2, 10, 10.0, b=0)
        )

    def test_degenerate_average_length(self):
        """测试平均长度为 0 时得分为 0 而不是 NaN"""
        assert bm25_term_score(1, 0, 1, 1, 0.0) == 0.0


class TestBM25Scorer:
    """测试 BM25Scorer"""

    @pytest.fixture
    def store(self):
        return build_store({
            1: {"go": 2, "kubernetes": 1},
            2: {"go": 1, "python": 3},
            3: {"photoshop": 2},
        })

    def test_scores_only_matching_documents(self, store):
        """测试只有命中查询词的文档出现在结果中"""
        stats = store.corpus_statistics()
        scores = BM25Scorer(store).score(["go"], stats.total_docs, stats.avg_doc_length)
        assert set(scores) == {1, 2}
        assert scores[1] > scores[2]

    def test_absent_terms_contribute_nothing(self, store):
        """测试索引中不存在的词项不贡献得分"""
        stats = store.corpus_statistics()
        scorer = BM25Scorer(store)
        assert scorer.score(["haskell"], stats.total_docs, stats.avg_doc_length) == {}
        assert scorer.score(["go", "haskell"], 3, 3.0) == scorer.score(["go"], 3, 3.0)

    def test_query_multiplicity(self, store):
        """测试查询中重复的词项按次数累加"""
        scorer = BM25Scorer(store)
        once = scorer.score(["go"], 3, 3.0)
        twice = scorer.score(["go", "go"], 3, 3.0)
        for document_id, score in once.items():
            assert twice[document_id] == pytest.approx(2 * score)

    @pytest.mark.parametrize("total_docs,avg_doc_length", [(0, 3.0), (3, 0.0), (-1, -1.0)])
    def test_degenerate_corpus_returns_empty(self, store, total_docs, avg_doc_length):
        """测试退化语料直接返回空结果"""
        assert BM25Scorer(store).score(["go"], total_docs, avg_doc_length) == {}

    def test_empty_query(self, store):
        assert BM25Scorer(store).score([], 3, 3.0) == {}

    def test_scores_are_finite(self, store):
        """测试 doc_freq 大于 N 时也不会产生 NaN/Inf"""
        scores = BM25Scorer(store).score(["go", "python", "kubernetes"], 1, 3.0)
        assert scores
        assert all(math.isfinite(score) and score > 0 for score in scores.values())

    def test_parameters(self, store):
        """测试参数读取、调整和校验"""
        scorer = BM25Scorer(store, k1=1.5, b=0.5)
        assert scorer.get_parameters() == {"k1": 1.5, "b": 0.5}

        scorer.set_parameters(b=0.9)
        assert scorer.get_parameters() == {"k1": 1.5, "b": 0.9}

        with pytest.raises(ValueError):
            scorer.set_parameters(b=1.5)
        with pytest.raises(ValueError):
            scorer.set_parameters(k1=-0.1)
        # 校验失败不改变当前参数
        assert scorer.get_parameters() == {"k1": 1.5, "b": 0.9}

        with pytest.raises(ValueError):
            BM25Scorer(store, b=-0.1)

    def test_parameters_change_scores(self, store):
        """测试 k1 影响词频饱和程度"""
        low = BM25Scorer(store, k1=0.0).score(["go"], 3, 3.0)
        high = BM25Scorer(store, k1=2.0).score(["go"], 3, 3.0)
        # k1 = 0 时词频不起作用，两个文档只差在 doc_freq 相同的 idf 上
        assert low[1] == pytest.approx(low[2])
        assert high[1] > high[2]

    def test_ranked(self, store):
        ranked = BM25Scorer(store).ranked(["go"], 3, 3.0)
        assert [document_id for document_id, _ in ranked] == [1, 2]


class TestRank:
    """测试排序"""

    def test_sorted_by_score_then_id(self):
        """测试得分降序，同分按文档 ID 升序"""
        assert rank({3: 1.0, 1: 1.0, 2: 2.0}) == [(2, 2.0), (1, 1.0), (3, 1.0)]

    def test_empty(self):
        assert rank({}) == []
