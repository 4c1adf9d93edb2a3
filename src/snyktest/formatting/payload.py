# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Machine-readable (JSON / SARIF) payloads."""

from __future__ import annotations

import json
from typing import Any

from ..models.options import AnalysisMode
from ..models.result import AggregatedOutcome, PerTargetResult


def _result_payload(result: PerTargetResult, mode: AnalysisMode) -> Any:
    if mode is AnalysisMode.CODE and result.error is None and result.sarif is not None:
        return result.sarif
    return result.to_dict()


def build_payload(outcome: AggregatedOutcome) -> Any:
    """
    SARIF log (code mode) or test result dict (dependency mode).

    A single target is emitted bare; several targets become a list.
    """
    payloads = [_result_payload(result, outcome.mode) for result in outcome.results]
    if len(payloads) == 1:
        return payloads[0]
    return payloads


def dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


__all__ = ["build_payload", "dumps"]
