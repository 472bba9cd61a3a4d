"""
分词器单元测试
验证规范化、停用词过滤、长度过滤和幂等性
"""

import pytest

from jobrank.search.tokenizer import (
    BASE_STOP_WORDS,
    CANDIDATE_STOP_WORDS,
    TermVector,
    Tokenizer,
    tokenize,
)


class TestTokenize:
    """测试 tokenize"""

    def test_lowercases_and_splits_on_punctuation(self):
        """测试小写化并把标点替换为空格"""
        assert tokenize("Senior PHP/Laravel Developer!") == ["senior", "php", "laravel", "developer"]

    def test_keeps_digits_and_underscores(self):
        """测试数字和下划线属于词项字符"""
        assert tokenize("python3 snake_case") == ["python3", "snake_case"]

    def test_drops_short_tokens(self):
        """测试丢弃长度小于 2 的词项"""
        assert tokenize("a C# dev in Go") == ["dev", "go"]

    def test_drops_base_stop_words(self):
        """测试基础停用词不会出现在结果中"""
        terms = tokenize("the developer and the designer for the team")
        assert terms == ["developer", "designer", "team"]
        assert not set(terms) & BASE_STOP_WORDS

    @pytest.mark.parametrize("text", [None, "", "   ", "!!! ??", "a b c"])
    def test_empty_input_yields_no_terms(self, text):
        """测试空文本或全部被过滤时返回空列表"""
        assert tokenize(text) == []

    @pytest.mark.parametrize("text", [
        "Build REST APIs with Laravel & Vue.js",
        "<p>Kubernetes, Go; Terraform</p>",
        "He was the best at C++ and Node",
    ])
    def test_idempotent(self, text):
        """测试对分词结果再次分词结果不变"""
        once = tokenize(text)
        assert tokenize(" ".join(once)) == once

    def test_preserves_order_and_duplicates(self):
        """测试保留输入顺序和重复词项"""
        assert tokenize("go rust go") == ["go", "rust", "go"]


class TestTokenizer:
    """测试 Tokenizer 类"""

    def test_candidate_stop_words_extend_base(self):
        """测试候选人停用词表是基础表的超集"""
        assert BASE_STOP_WORDS < CANDIDATE_STOP_WORDS
        assert "was" in CANDIDATE_STOP_WORDS

    def test_stop_words_are_configurable(self):
        """测试停用词表通过构造参数传入"""
        text = "she was a developer"
        assert Tokenizer(BASE_STOP_WORDS).tokenize(text) == ["she", "was", "developer"]
        assert Tokenizer(CANDIDATE_STOP_WORDS).tokenize(text) == ["she", "developer"]
        assert Tokenizer(["developer"]).tokenize(text) == ["she", "was"]

    def test_count_builds_term_vector(self):
        """测试词频统计满足 doc_length == sum(term_freq)"""
        vector = Tokenizer().count("go go python rust go")

        assert vector.term_freqs == {"go": 3, "python": 1, "rust": 1}
        assert vector.doc_length == 5
        assert vector.doc_length == sum(vector.term_freqs.values())
        assert vector.terms == frozenset({"go", "python", "rust"})

    def test_empty_term_vector(self):
        """测试空文本得到空向量"""
        vector = Tokenizer().count("the and or")
        assert vector.is_empty
        assert vector.doc_length == 0
        assert TermVector.from_terms([]).is_empty
