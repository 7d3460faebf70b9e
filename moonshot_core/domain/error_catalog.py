"""Moonshot 错误码目录与相似度计算。

服务端的错误消息会插入运行时数值（用户 ID、限额、等待秒数等），
无法与文档中的消息模板做精确匹配。这里把目录中的 message 当作
“带参数的模板”，按“相同位置上相同单词的个数”打分来找最接近的条目。
这是启发式规则：模板占位符较多或消息措辞变化时可能选错描述。
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class ErrorDescriptor:
    """错误目录中的一条静态记录，进程启动时构建，之后只读。"""

    code: int
    type: str
    message: str
    description: str


@dataclass(frozen=True)
class ClassifiedError:
    """一次失败请求的分类结果。

    message 为服务端原始消息，description 来自最相似的目录条目。
    """

    code: int
    type: str
    message: str
    description: str = ""


UNKNOWN_DESCRIPTION = "未知错误"


def unknown_error(message: str = "unknown error") -> ClassifiedError:
    return ClassifiedError(code=-1, type="unknown", message=message, description=UNKNOWN_DESCRIPTION)


ERROR_CATALOG: Tuple[ErrorDescriptor, ...] = (
    ErrorDescriptor(400, "content_filter", "The request was rejected because it was considered high risk", "内容审查拒绝，您的输入或生成内容可能包含不安全或敏感内容，请您避免输入易产生敏感内容的提示语，谢谢"),
    ErrorDescriptor(400, "invalid_request_error", "Invalid request: {error_details}", "请求无效，通常是您请求格式错误或者缺少必要参数，请检查后重试"),
    ErrorDescriptor(400, "invalid_request_error", "Input token length too long", "请求中的 tokens 长度过长，请求不要超过模型 tokens 的最长限制"),
    ErrorDescriptor(400, "invalid_request_error", "Your request exceeded model token limit : {max_model_length}", "请求的 tokens 数和设置的 max_tokens 加和超过了模型规格长度，请检查请求体的规格或选择合适长度的模型"),
    ErrorDescriptor(400, "invalid_request_error", "Invalid purpose: only 'file-extract' accepted", "请求中的目的（purpose）不正确，当前只接受 'file-extract'，请修改后重新请求"),
    ErrorDescriptor(400, "invalid_request_error", "File size is too large, max file size is 100MB, please confirm and re-upload the file", "上传的文件大小超过了限制，请重新上传"),
    ErrorDescriptor(400, "invalid_request_error", "File size is zero, please confirm and re-upload the file", "上传的文件大小为 0，请重新上传"),
    ErrorDescriptor(400, "invalid_request_error", "The number of files you have uploaded exceeded the max file count {max_file_count}, please delete previous uploaded files", "上传的文件总数超限，请删除不用的早期的文件后重新 上传"),
    ErrorDescriptor(401, "invalid_authentication_error", "Invalid Authentication", "鉴权失败，请检查 apikey 是否正确，请修改后重试"),
    ErrorDescriptor(401, "invalid_authentication_error", "Incorrect API key provided", "鉴权失败，请检查 apikey 是否提供以及 apikey 是否正确，请修改后重试"),
    ErrorDescriptor(403, "exceeded_current_quota_error", "Your account {uid}<{ak-id}> is not active, current state: {current state}, you may consider to check your account balance", "账户异常，请检查您的账户余额"),
    ErrorDescriptor(403, "permission_denied_error", "The API you are accessing is not open", "访问的 API 暂未开放"),
    ErrorDescriptor(403, "permission_denied_error", "You are not allowed to get other user info", "访问其他用户信息的行为不被允许，请检查"),
    ErrorDescriptor(404, "resource_not_found_error", "Not found the model or Permission denied", "不存在此模型或者没有授权访问此模型，请检查后重试"),
    ErrorDescriptor(404, "resource_not_found_error", "Users {user_id} not found", "找不到该用户，请检查后重试"),
    ErrorDescriptor(429, "engine_overloaded_error", "The engine is currently overloaded, please try again later", "当前并发请求过多，节点限流中，请稍后重试；建议充值升级 tier，享受更丝滑的体验"),
    ErrorDescriptor(429, "exceeded_current_quota_error", "You exceeded your current token quota: {token_credit}, please check your account balance", "账户额度不足，请检查账户余额，保证账户余额可匹配您 tokens 的消耗费用后重试"),
    ErrorDescriptor(429, "rate_limit_reached_error", "Your account {uid}<{ak-id}> request reached max concurrency: {Concurrency}, please try again after {time} seconds", "请求触发了账户并发个数的限制，请等待指定时间后重试"),
    ErrorDescriptor(429, "rate_limit_reached_error", "Your account {uid}<{ak-id}> request reached max request: {RPM}, please try again after {time} seconds", "请求触发了账户 RPM 速率限制，请等待指定时间后重试"),
    ErrorDescriptor(429, "rate_limit_reached_error", "Your account {uid}<{ak-id}> request reached TPM rate limit, current:{current_tpm}, limit:{max_tpm}", "请求触发了账户 TPM 速率限制，请等待指定时间后重试"),
    ErrorDescriptor(429, "rate_limit_reached_error", "Your account {uid}<{ak-id}> request reached TPD rate limit,current:{current_tpd}, limit:{max_tpd}", "请求触发了账户 TPD 速率限制，请等待指定时间后重试"),
    ErrorDescriptor(500, "server_error", "Failed to extract file: {error}", "解析文件失败，请重试"),
    ErrorDescriptor(500, "unexpected_output", "invalid state transition", "内部错误，请联系管理员"),
)


def list_errors() -> Tuple[ErrorDescriptor, ...]:
    """返回只读的错误目录。"""

    return ERROR_CATALOG


def similarity(a: Union[ErrorDescriptor, ClassifiedError], b: Union[ErrorDescriptor, ClassifiedError]) -> int:
    """计算两条错误的相似度。

    code 或 type 不同时恒为 0；否则按单个空格切词，
    在较短序列的长度内统计同一位置上完全相同的单词个数。
    """

    if a.code != b.code or a.type != b.type:
        return 0
    words_a = a.message.split(" ")
    words_b = b.message.split(" ")
    return sum(1 for wa, wb in zip(words_a, words_b) if wa == wb)
