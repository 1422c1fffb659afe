"""
Validation rules for well-known GGUF metadata keys.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from .gguf import GGUFArray, GGUFContainer, GGUFKV
from .gguf_types import GGUFValueType as VT

# Expected type and constraints for known GGUF keys.
# "element" constrains the element type of an ARRAY value.
KNOWN_KEYS: Dict[str, Dict[str, Any]] = {
    # General (Required or Recommended)
    "general.architecture": {"type": VT.STRING, "pattern": r"^[a-z0-9_\-]+$", "required": True},
    "general.alignment": {"type": VT.UINT32, "min": 8, "multiple_of": 8},
    "general.quantization_version": {"type": VT.UINT32, "min": 1},
    "general.file_type": {"type": VT.UINT32},
    "general.name": {"type": VT.STRING},
    # LLaMA Family
    "llama.context_length": {"type": VT.UINT32, "min": 1},
    "llama.embedding_length": {"type": VT.UINT32, "min": 1},
    "llama.block_count": {"type": VT.UINT32, "min": 1},
    "llama.feed_forward_length": {"type": VT.UINT32, "min": 1},
    "llama.attention.head_count": {"type": VT.UINT32, "min": 1},
    "llama.attention.head_count_kv": {"type": VT.UINT32, "min": 1},
    "llama.rope.dimension_count": {"type": VT.UINT32, "min": 1},
    "llama.attention.layer_norm_rms_epsilon": {"type": VT.FLOAT32, "min": 1e-9, "max": 1e-2},
    "llama.expert_count": {"type": VT.UINT32, "min": 1},
    "llama.expert_used_count": {"type": VT.UINT32, "min": 1},
    # Tokenizer
    "tokenizer.ggml.model": {"type": VT.STRING},
    "tokenizer.ggml.tokens": {"type": VT.ARRAY, "element": VT.STRING},
    "tokenizer.ggml.scores": {"type": VT.ARRAY, "element": VT.FLOAT32},
    "tokenizer.ggml.token_type": {"type": VT.ARRAY, "element": VT.INT32},
    "tokenizer.ggml.merges": {"type": VT.ARRAY, "element": VT.STRING},
    "tokenizer.ggml.bos_token_id": {"type": VT.UINT32},
    "tokenizer.ggml.eos_token_id": {"type": VT.UINT32},
    "tokenizer.chat_template": {"type": VT.STRING},
}


def check_entry(item: GGUFKV, rule: Dict[str, Any]) -> Optional[str]:
    """Return a violation message for ``item``, or None if it conforms."""
    if item.type is not rule["type"]:
        return f"expected {rule['type'].name}, found {item.type.name}"
    value = item.value
    if "element" in rule and isinstance(value, GGUFArray):
        if value.element_type is not rule["element"]:
            return (
                f"expected elements of {rule['element'].name}, "
                f"found {value.element_type.name}"
            )
    if "pattern" in rule and not re.match(rule["pattern"], value):
        return f"{value!r} does not match {rule['pattern']}"
    if ("min" in rule or "max" in rule) and isinstance(value, float) and not math.isfinite(value):
        return f"{value} is not a finite number"
    if "min" in rule and value < rule["min"]:
        return f"{value} < minimum {rule['min']}"
    if "max" in rule and value > rule["max"]:
        return f"{value} > maximum {rule['max']}"
    if "multiple_of" in rule and value % rule["multiple_of"] != 0:
        return f"{value} is not a multiple of {rule['multiple_of']}"
    return None


def validate_known_keys(container: GGUFContainer) -> List[Tuple[str, bool, str]]:
    """Check every known key present (and every required key) in ``container``.

    Returns:
        ``(key, ok, details)`` tuples in file order, then missing required keys.
    """
    results: List[Tuple[str, bool, str]] = []
    for item in container:
        rule = KNOWN_KEYS.get(item.key)
        if rule is None:
            continue
        problem = check_entry(item, rule)
        results.append((item.key, problem is None, problem or rule["type"].name))
    present = set(container.keys())
    for key, rule in KNOWN_KEYS.items():
        if rule.get("required") and key not in present:
            results.append((key, False, "required key missing"))
    return results
