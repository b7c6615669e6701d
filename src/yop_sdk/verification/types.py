"""
Type definitions for response verification and digital envelopes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

ENVELOPE_SEPARATOR = "$"

# Fixed failure messages returned by the envelope decryptor
MESSAGE_EMPTY_CONTENT = "内容参数为空"
MESSAGE_EMPTY_PRIVATE_KEY = "商户私钥参数为空"
MESSAGE_EMPTY_PUBLIC_KEY = "易宝开放平台公钥参数为空"
MESSAGE_SIGNATURE_INVALID = "验签失败"


class EnvelopeStatus(str, Enum):
    """Digital envelope processing status"""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class EnvelopeResult:
    """
    Outcome of opening a digital envelope

    Attributes:
        status: success or failed
        result: Business payload (set on success)
        message: Failure reason (empty on success)
    """
    status: EnvelopeStatus
    result: str = ""
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == EnvelopeStatus.SUCCESS

    @classmethod
    def success(cls, result: str) -> "EnvelopeResult":
        return cls(status=EnvelopeStatus.SUCCESS, result=result)

    @classmethod
    def failed(cls, message: str, result: str = "") -> "EnvelopeResult":
        return cls(status=EnvelopeStatus.FAILED, result=result, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "result": self.result,
            "message": self.message,
        }


@dataclass(frozen=True)
class EnvelopeMessage:
    """
    Wire form of a digital envelope: ``<encrypted key>$<encrypted payload>``

    Both segments are URL-safe base64 without padding.
    """
    encrypted_key_segment: str
    encrypted_payload_segment: str

    def __post_init__(self):
        if not self.encrypted_key_segment:
            raise ValueError("Encrypted key segment cannot be empty")
        if not self.encrypted_payload_segment:
            raise ValueError("Encrypted payload segment cannot be empty")

    @classmethod
    def parse(cls, content: str) -> "EnvelopeMessage":
        """
        Split envelope text into its two segments.

        Raises:
            ValueError: If the content does not have exactly two segments
        """
        segments = content.split(ENVELOPE_SEPARATOR)
        if len(segments) != 2:
            raise ValueError(f"Digital envelope must have 2 segments, got {len(segments)}")
        return cls(encrypted_key_segment=segments[0], encrypted_payload_segment=segments[1])

    def __str__(self) -> str:
        return f"{self.encrypted_key_segment}{ENVELOPE_SEPARATOR}{self.encrypted_payload_segment}"
