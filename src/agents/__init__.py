"""에이전트 패키지

  CheckoutOrchestrator - 체크아웃 상태 머신 총괄
  ReservationTimer     - 좌석 홀드 카운트다운
"""

from src.agents.orchestrator import CheckoutOrchestrator
from src.agents.reservation_timer import ReservationTimer

__all__ = [
    "CheckoutOrchestrator",
    "ReservationTimer",
]
