"""
语义匹配服务 - 通过OpenAI兼容接口(DeepSeek)查找目标文本中的相似片段
"""
import json
import re
from typing import Optional

import openai
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from revision_compare.core.errors import CollaboratorFailure
from revision_compare.core.logging import LogEvent, preview
from revision_compare.models.similarity import SimilarMatch
from revision_compare.services.base_service import BaseService, singleton

_FENCE = re.compile(r"```json\s*|\s*```")

PROMPT_TEMPLATE = """源文本: "{source_text}"
目标文本: "{target_text}"
在源文本中选中的句子或段落: "{selected_text}"

任务：
1. 仔细分析源文本中选中的句子或段落，理解其核心含义。
2. 在目标文本中寻找与选中内容最相似的最小文本单元（可以是短语、分句或句子）。
3. 返回的相似文本应尽可能精确匹配选中内容的核心含义，避免包含不必要的额外信息。
4. 如果找到的相似文本是一个较长句子的一部分，只返回与选中内容最相关的部分。
5. 返回找到的相似文本段，以及它在目标文本中的准确起始和结束字符索引（基于字符）。

请以 JSON 格式返回结果，格式如下：
{{
  "similar_text": "找到的最相似且最精确的文本段",
  "start": 起始位置,
  "end": 结束位置,
  "explanation": "简要解释为什么这个文本段被认为是最相似的，以及如何精确匹配了选中内容的核心含义"
}}

只返回 JSON 对象，不要有其他文本或格式。确保返回的文本段是最精确的匹配，不包含多余信息。"""


def build_prompt(source_text: str, target_text: str, selected_text: str) -> str:
    return PROMPT_TEMPLATE.format(
        source_text=source_text,
        target_text=target_text,
        selected_text=selected_text,
    )


def parse_response(content: Optional[str]) -> SimilarMatch:
    """解析模型输出，去掉 ```json 代码块标记"""
    if not content:
        raise CollaboratorFailure("empty completion")
    cleaned = _FENCE.sub("", content).strip()
    try:
        return SimilarMatch.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as e:
        raise CollaboratorFailure("unparseable completion", original_error=e)


@singleton
class SimilarityService(BaseService):
    """语义匹配服务 - 保持简单"""

    def _initialize(self):
        """初始化OpenAI客户端"""
        self.client: Optional[openai.AsyncOpenAI] = None
        if self.settings.has_similarity_credentials:
            self.client = openai.AsyncOpenAI(
                api_key=self.settings.deepseek_api_key,
                base_url=self.settings.deepseek_base_url,
                timeout=self.settings.request_timeout,
                max_retries=0,
            )
        self.model = self.settings.similarity_model

    async def _complete(self, prompt: str) -> Optional[str]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(openai.APIError),
            reraise=True,
        ):
            with attempt:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                )
                if not response.choices:
                    raise CollaboratorFailure("empty completion")
                return response.choices[0].message.content
        return None

    async def find_similar(self, source_text: str, target_text: str, selected_text: str) -> SimilarMatch:
        """
        在目标文本中查找与选中内容最相似的片段

        Raises:
            CollaboratorFailure: 未配置密钥、调用失败或返回无法解析
        """
        self._ensure_initialized()
        if self.client is None:
            raise CollaboratorFailure("API key not configured")

        self.logger.info(
            LogEvent.SIMILARITY_CALL,
            model=self.model,
            selected=preview(selected_text),
            target_length=len(target_text),
        )
        try:
            content = await self._complete(build_prompt(source_text, target_text, selected_text))
        except CollaboratorFailure as e:
            self.logger.error(LogEvent.SIMILARITY_ERROR, error=e.message)
            raise
        except openai.OpenAIError as e:
            self.logger.error(LogEvent.SIMILARITY_ERROR, error=str(e))
            raise CollaboratorFailure("API call failed", original_error=e)
        except Exception as e:
            # 非 OpenAI 异常（如响应结构异常）同样降级为未找到
            self.logger.error(LogEvent.SIMILARITY_ERROR, error=str(e), exc_info=e)
            raise CollaboratorFailure("unexpected completion error", original_error=e)

        match = parse_response(content)
        self.logger.info(
            LogEvent.SIMILARITY_SUCCESS,
            similar_text=preview(match.similar_text),
            start=match.start,
            end=match.end,
        )
        return match
