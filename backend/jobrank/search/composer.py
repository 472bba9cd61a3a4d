"""
加权内容拼接器

BM25 只看扁平的词频，字段重要性通过"重复拼接"表达：权重为 n 的字段重复 n 次。
小数权重（1.5x、2.5x）用"追加前一半字符串"近似：截取 HTML 剥离后字符串的
前 floor(len/2) 个字符，以空格分隔追加。该近似必须逐字符复现，否则索引对不上。

三个拼接器：
- JobContentComposer：职位作为被索引的文档
- CandidateContentComposer：候选人作为被索引的文档（skills 优先的权重方案）
- JobQueryComposer：职位作为查询，为其投递者排序时使用（独立的权重方案）
"""

import re
from typing import Any, Iterable, List, Optional

from jobrank.exceptions import NoContentError
from jobrank.search.tokenizer import (
    BASE_STOP_WORDS,
    CANDIDATE_STOP_WORDS,
    TermVector,
    Tokenizer,
)

_TAG = re.compile(r"<[^>]*>")


def strip_tags(text: Optional[str]) -> str:
    """剥离 HTML 标签（不插入空格）"""
    if not text:
        return ""
    return _TAG.sub("", text)


def half(text: str) -> str:
    """字符串的前 floor(len/2) 个字符"""
    return text[: len(text) // 2]


def repeat(text: str, times: int) -> str:
    """重复 times 次，空格分隔"""
    return " ".join([text] * times)


def repeat_with_half(text: str, full_copies: int = 1) -> str:
    """full_copies 份完整文本再追加前一半，例如 1 -> 1.5x，2 -> 2.5x"""
    return " ".join([text] * full_copies + [half(text)])


def _name_of(related: Any) -> str:
    """关联对象的 name 字段，不存在时返回空串"""
    if related is None:
        return ""
    return getattr(related, "name", None) or ""


class ContentComposer:
    """
    拼接器基类

    子类实现 fragments()，按字段顺序返回加权后的文本片段
    """

    kind = "document"
    default_stop_words: Iterable[str] = BASE_STOP_WORDS

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or Tokenizer(self.default_stop_words)

    def fragments(self, entity: Any) -> List[str]:
        raise NotImplementedError

    def compose_text(self, entity: Any) -> str:
        """按字段顺序以单个空格拼接所有非空片段"""
        return " ".join(fragment for fragment in self.fragments(entity) if fragment)

    def compose(self, entity: Any) -> TermVector:
        """
        拼接、分词、统计词频

        Raises:
            NoContentError: 分词后没有任何词项
        """
        vector = self.tokenizer.count(self.compose_text(entity))
        if vector.is_empty:
            raise NoContentError(getattr(entity, "id", None), self.kind)
        return vector


class JobContentComposer(ContentComposer):
    """
    职位文档拼接

    | 字段        | 权重 |
    | title       | 3x   |
    | 每个技能    | 2x   |
    | 分类名称    | 1.5x |
    | 描述        | 1x（先剥离 HTML）|

    标签和公司名不参与索引
    """

    kind = "job"

    def fragments(self, job: Any) -> List[str]:
        fragments = []
        if job.title:
            fragments.append(repeat(job.title, 3))
        for skill_name in job.skill_names:
            fragments.append(repeat(skill_name, 2))
        category_name = _name_of(job.category)
        if category_name:
            fragments.append(repeat_with_half(category_name))
        description = strip_tags(job.description)
        if description:
            fragments.append(description)
        return fragments


class CandidateContentComposer(ContentComposer):
    """
    候选人文档拼接（skills 优先方案）

    | 字段                      | 权重 |
    | 每个技能                  | 3x   |
    | title                     | 2.5x |
    | 每段经历的 responsibilities | 2x（先剥离 HTML）|
    | 每段经历的 designation     | 2x   |
    | bio                       | 1.5x |
    | 每个学位                  | 1x   |
    | 职业名称                  | 1x   |

    地址、电话、邮箱属于隐私字段，不参与索引
    """

    kind = "candidate"
    default_stop_words = CANDIDATE_STOP_WORDS

    def fragments(self, candidate: Any) -> List[str]:
        fragments = []
        for skill_name in candidate.skill_names:
            fragments.append(repeat(skill_name, 3))
        if candidate.title:
            fragments.append(repeat_with_half(candidate.title, full_copies=2))
        for experience in candidate.experiences:
            responsibilities = strip_tags(experience.responsibilities)
            if responsibilities:
                fragments.append(repeat(responsibilities, 2))
        for experience in candidate.experiences:
            if experience.designation:
                fragments.append(repeat(experience.designation, 2))
        if candidate.bio:
            fragments.append(repeat_with_half(candidate.bio))
        for education in candidate.educations:
            if education.degree:
                fragments.append(education.degree)
        profession_name = _name_of(candidate.profession)
        if profession_name:
            fragments.append(profession_name)
        return fragments


class JobQueryComposer(ContentComposer):
    """
    职位作为查询（为投递者排序）

    | 字段      | 权重 |
    | title     | 3x   |
    | 描述      | 2x（先剥离 HTML）|
    | 每个技能  | 1.5x |
    | 分类名称  | 1.5x |
    | 角色名称  | 1.5x |

    查询词保留重复：同一词项出现 n 次，打分时累加 n 次
    """

    kind = "job query"

    def fragments(self, job: Any) -> List[str]:
        fragments = []
        if job.title:
            fragments.append(repeat(job.title, 3))
        description = strip_tags(job.description)
        if description:
            fragments.append(repeat(description, 2))
        for skill_name in job.skill_names:
            fragments.append(repeat_with_half(skill_name))
        for related in (job.category, job.role):
            name = _name_of(related)
            if name:
                fragments.append(repeat_with_half(name))
        return fragments

    def query_terms(self, job: Any) -> List[str]:
        """职位的查询词列表（可能为空，不抛异常）"""
        return self.tokenizer.tokenize(self.compose_text(job))
