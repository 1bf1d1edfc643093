"""체크아웃 오케스트레이터 (CheckoutOrchestrator)

좌석 선택 → 승객 정보 → 결제 이관 순서를 상태 머신으로 제어한다.

  IDLE → SELECTING_SEATS → SAVING_PASSENGERS → AWAITING_STEP2
       → PAYING → REDIRECTED
  (ERROR / IDLE은 어느 상태에서나 진입 가능)

협력 객체(좌석 저장소, 명단, 게이트, 타이머, 결제 이관)는 생성자에서
주입받으며, 주입하지 않으면 설정값으로 기본 구현을 만든다.

예약 타이머 만료는 모든 진행 중 작업보다 우선한다. 만료 시점에
진행 중이던 HTTP 호출은 끝까지 기다리되 그 결과는 버린다.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Union

from src.agent.metrics import CheckoutMetrics
from src.agent.state import (
    PROGRESS_DONE,
    PROGRESS_ORDER_CREATED,
    PROGRESS_ORDER_SENT,
    PROGRESS_PRECONDITIONS,
    PROGRESS_REFERENCE,
    PROGRESS_STARTED,
    PROGRESS_URL_RECEIVED,
    PROGRESS_URL_REQUESTED,
    CheckoutState,
    validate_transition,
)
from src.agents.reservation_timer import ReservationTimer
from src.models.config import CheckoutConfig
from src.models.errors import (
    CheckoutError,
    OrderCreationError,
    PassengerSaveError,
    PaymentUrlError,
    PreconditionError,
)
from src.models.order import PaymentMethod, ReservationSession, TicketSnapshot
from src.models.passenger import SavedRoster
from src.models.seat import SeatState
from src.skills import messages
from src.skills.api_client import ApiClient
from src.skills.notifier import NotifierSkill
from src.skills.passenger_roster import PassengerRoster
from src.skills.passenger_sync import PassengerSyncSkill
from src.skills.payment_handoff import PaymentHandoff
from src.skills.seat_selection import SeatSelectionStore
from src.skills.snapshot import StaticSnapshotProvider
from src.skills.validation_gate import ValidationGate
from src.utils.auth_session import AuthSession
from src.utils.browser import BrowserNavigator
from src.utils.route_history import RouteHistory

logger = logging.getLogger("bilit.agent.orchestrator")

StateListener = Callable[[CheckoutState, CheckoutState], None]
ProgressListener = Callable[[int], None]
Hook = Callable[..., Any]


async def _call_hook(hook: Hook, *args: Any) -> None:
    """동기/비동기 훅 호출 (실패는 로그만)"""
    try:
        result = hook(*args)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("확장 훅 실행 실패")


class CheckoutOrchestrator:
    """체크아웃 상태 머신

    단일 체크아웃 시도 = 단일 ReservationSession.
    """

    def __init__(
        self,
        config: Optional[CheckoutConfig] = None,
        *,
        auth: Optional[AuthSession] = None,
        snapshot_provider: Optional[Any] = None,
        store: Optional[SeatSelectionStore] = None,
        roster: Optional[PassengerRoster] = None,
        gate: Optional[ValidationGate] = None,
        timer: Optional[ReservationTimer] = None,
        handoff: Optional[PaymentHandoff] = None,
        notifier: Optional[NotifierSkill] = None,
        navigator: Optional[BrowserNavigator] = None,
        route_history: Optional[RouteHistory] = None,
        client: Optional[ApiClient] = None,
        metrics: Optional[CheckoutMetrics] = None,
        asset_id: Optional[str] = None,
        on_expire: Optional[Hook] = None,
        on_orphaned_order: Optional[Hook] = None,
    ) -> None:
        self._config = config or CheckoutConfig()
        cfg = self._config
        self._metrics = metrics or CheckoutMetrics()
        self._auth = auth or AuthSession()
        self._snapshot_provider = snapshot_provider or StaticSnapshotProvider()
        self._client = client or ApiClient(
            request_timeout=cfg.request_timeout,
            connect_timeout=cfg.connect_timeout,
            max_connections=cfg.max_connections,
            metrics=self._metrics,
        )

        self._store = store or SeatSelectionStore(cfg.max_selectable)
        if roster is None:
            sync = (
                PassengerSyncSkill(self._client, cfg.passengers_url)
                if cfg.passengers_url else None
            )
            roster = PassengerRoster(
                self._store,
                buyer=self._auth.profile,
                duplicate_policy=cfg.duplicate_national_id_policy,
                sync=sync,
                auth=self._auth,
            )
        self._roster = roster
        self._gate = gate or ValidationGate(self._roster)
        self._timer = timer or ReservationTimer()
        self._timer.on_expire(self._handle_expiry)
        self._handoff = handoff or PaymentHandoff(self._client, cfg)
        self._notifier = notifier or NotifierSkill(
            methods=cfg.notification_methods,
            webhook_url=cfg.webhook_url,
            max_entries=cfg.max_notice_entries,
        )
        self._navigator = navigator or BrowserNavigator()
        self._route_history = route_history or RouteHistory(
            cfg.route_history_path, cfg.route_ttl_seconds,
        )

        self._asset_id = asset_id
        self._on_expire = on_expire
        self._on_orphaned_order = on_orphaned_order

        self._state = CheckoutState.IDLE
        self._progress = 0
        self._submitting = False
        self._expired = False
        self._attempt = 0
        self._abort_event = asyncio.Event()
        self._session: Optional[ReservationSession] = None
        self._saved_roster: Optional[SavedRoster] = None
        self._payment_method = PaymentMethod.GATEWAY
        self._last_error: Optional[CheckoutError] = None
        self._redirect_url: Optional[str] = None
        self.orphaned_references: list[str] = []

        self._state_listeners: list[StateListener] = []
        self._progress_listeners: list[ProgressListener] = []

    # ── Properties ──

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def last_error(self) -> Optional[CheckoutError]:
        return self._last_error

    @property
    def session(self) -> Optional[ReservationSession]:
        return self._session

    @property
    def reference_number(self) -> Optional[str]:
        return self._session.reference_number if self._session else None

    @property
    def redirect_url(self) -> Optional[str]:
        return self._redirect_url

    @property
    def saved_roster(self) -> Optional[SavedRoster]:
        return self._saved_roster

    @property
    def payment_method(self) -> PaymentMethod:
        return self._payment_method

    @property
    def metrics(self) -> CheckoutMetrics:
        return self._metrics

    @property
    def store(self) -> SeatSelectionStore:
        return self._store

    @property
    def roster(self) -> PassengerRoster:
        return self._roster

    @property
    def gate(self) -> ValidationGate:
        return self._gate

    @property
    def timer(self) -> ReservationTimer:
        return self._timer

    @property
    def notifier(self) -> NotifierSkill:
        return self._notifier

    # ── Listeners ──

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def add_progress_listener(self, listener: ProgressListener) -> None:
        self._progress_listeners.append(listener)

    # ── State Machine ──

    def _transition(self, new_state: CheckoutState) -> bool:
        old = self._state
        if not validate_transition(old, new_state):
            logger.warning(
                "잘못된 상태 전이 시도: %s → %s", old.name, new_state.name,
            )
            return False
        self._state = new_state
        logger.info("[상태] %s → %s", old.name, new_state.name)
        for listener in list(self._state_listeners):
            try:
                listener(old, new_state)
            except Exception:
                logger.exception("상태 리스너 처리 실패")
        return True

    def _set_progress(self, value: int) -> None:
        """시도 내에서는 증가만 허용, 0은 초기화"""
        if value != 0 and value <= self._progress:
            return
        self._progress = value
        for listener in list(self._progress_listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("진행률 리스너 처리 실패")

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt and not self._expired

    # ── Step 1: 좌석 선택 ──

    def start_session(
        self,
        ticket_token: str,
        service_token: str,
        hold_token: str,
        route: Optional[str] = None,
    ) -> ReservationSession:
        """새 체크아웃 시도 시작 + 타이머 가동"""
        if self._state is not CheckoutState.IDLE:
            self._reset(reason="restarted")
            self._transition(CheckoutState.IDLE)

        self._attempt += 1
        self._expired = False
        self._abort_event = asyncio.Event()
        self._last_error = None
        self._redirect_url = None
        self._saved_roster = None
        self._payment_method = PaymentMethod.GATEWAY
        self._set_progress(0)

        self._session = ReservationSession(
            ticket_token=ticket_token,
            service_token=service_token,
            hold_token=hold_token,
            duration_seconds=self._config.reservation_seconds,
            selection=self._store,
        )
        if route:
            self._route_history.save_route(route)

        self._transition(CheckoutState.SELECTING_SEATS)
        self._timer.start(self._config.reservation_seconds)
        logger.info("체크아웃 시작 (시도 #%d)", self._attempt)
        return self._session

    def select_seat(self, seat_id: int) -> SeatState:
        """좌석 클릭. 좌석 선택 단계가 아니면 변화 없음."""
        if self._state is not CheckoutState.SELECTING_SEATS:
            logger.debug("좌석 선택 단계 아님 (%s) - 클릭 무시", self._state.name)
            seat = self._store.seat(seat_id)
            return seat.state if seat else SeatState.BLOCKED
        return self._store.select_seat(seat_id)

    def remove_seat(self, seat_id: int) -> bool:
        if self._state is not CheckoutState.SELECTING_SEATS:
            return False
        return self._store.remove_seat(seat_id)

    def set_passenger_field(self, seat_id: int, field: str, value: str) -> bool:
        return self._roster.set_field(seat_id, field, value)

    def set_contact(self, enabled: bool, phone: str = "", email: str = "") -> bool:
        return self._roster.set_contact(enabled, phone, email)

    # ── Step 2: 승객 저장 ──

    async def submit_passengers(self) -> bool:
        """승객 명단 저장 → AWAITING_STEP2

        유효한 승객이 한 명도 없거나 이미 제출 중이면 아무것도 하지 않는다.
        """
        if self._submitting:
            logger.info("이미 제출 중 - 무시")
            return False
        if self._state is not CheckoutState.SELECTING_SEATS:
            logger.warning("승객 제출 불가 상태: %s", self._state.name)
            return False
        if not self._gate.is_any_passenger_valid:
            logger.info("유효한 승객 없음 - 진행 차단")
            return False

        attempt = self._attempt
        self._submitting = True
        self._transition(CheckoutState.SAVING_PASSENGERS)
        try:
            saved = await self._roster.commit()
        except PassengerSaveError as e:
            if not self._is_current(attempt):
                return False
            logger.error("승객 저장 실패: %s", e)
            self._metrics.record_save_failure()
            self._last_error = e
            self._transition(CheckoutState.ERROR)
            await self._notifier.notify(messages.SAVE_FAILED[0], e.user_message, "error")
            self._transition(CheckoutState.SELECTING_SEATS)
            return False
        finally:
            if attempt == self._attempt:
                self._submitting = False

        if not self._is_current(attempt):
            logger.info("만료/취소된 시도의 저장 결과 폐기")
            return False

        self._saved_roster = saved
        self._store.freeze()
        self._transition(CheckoutState.AWAITING_STEP2)
        await self._notifier.notify(*messages.SAVE_SUCCEEDED, "success")
        return True

    def back_to_seats(self) -> bool:
        """AWAITING_STEP2 → SELECTING_SEATS (저장 명단 폐기, 입력은 유지)"""
        if self._state is not CheckoutState.AWAITING_STEP2 or self._submitting:
            return False
        self._saved_roster = None
        self._store.unfreeze()
        return self._transition(CheckoutState.SELECTING_SEATS)

    def choose_payment_method(self, method: Union[PaymentMethod, str]) -> PaymentMethod:
        if isinstance(method, str):
            method = PaymentMethod(method)
        self._payment_method = method
        logger.info("결제 수단: %s", method.value)
        return method

    # ── Step 3: 결제 ──

    def _check_preconditions(self) -> tuple[ReservationSession, TicketSnapshot, SavedRoster]:
        """네트워크 호출 전 필수 조건 확인

        Raises:
            PreconditionError: 로그인/스냅샷/명단 누락
        """
        if not self._auth.has_credentials or self._session is None:
            raise PreconditionError("인증 토큰 없음", messages.LOGIN_REQUIRED[1])
        snapshot = self._snapshot_provider.get_snapshot()
        if snapshot is None:
            raise PreconditionError("서비스 스냅샷 없음", messages.SERVICE_MISSING[1])
        saved = self._saved_roster
        if saved is None or not saved.passengers:
            raise PreconditionError("확정 승객 없음", messages.NO_PASSENGERS[1])
        return self._session, snapshot, saved

    async def confirm_payment(self) -> Optional[str]:
        """주문 생성 → 결제 URL 요청 → 리다이렉트

        Returns:
            이동한 결제 URL, 실패/만료/취소 시 None
        """
        if self._submitting:
            logger.info("이미 결제 진행 중 - 무시")
            return None
        if self._state is not CheckoutState.AWAITING_STEP2:
            logger.warning("결제 확인 불가 상태: %s", self._state.name)
            return None

        attempt = self._attempt
        self._submitting = True
        self._transition(CheckoutState.PAYING)
        self._set_progress(PROGRESS_STARTED)
        try:
            return await self._pay(attempt)
        except PreconditionError as e:
            await self._fail_payment(attempt, e, messages.PAYMENT_FAILED[0])
        except OrderCreationError as e:
            await self._fail_payment(attempt, e, messages.ORDER_FAILED[0])
        except PaymentUrlError as e:
            if self._is_current(attempt):
                await self._report_orphan(e.reference_number)
            await self._fail_payment(attempt, e, messages.PAYMENT_FAILED[0])
        finally:
            if attempt == self._attempt:
                self._submitting = False
        return None

    async def _pay(self, attempt: int) -> Optional[str]:
        session, snapshot, saved = self._check_preconditions()
        self._set_progress(PROGRESS_PRECONDITIONS)

        self._set_progress(PROGRESS_ORDER_SENT)
        reference = await self._handoff.create_order(
            snapshot, saved, session, self._auth, self._asset_id,
        )
        if not self._is_current(attempt):
            logger.warning("만료된 시도의 주문 결과 폐기: ref=%s", reference)
            return None
        self._metrics.record_order()
        self._set_progress(PROGRESS_ORDER_CREATED)
        session.reference_number = reference
        self._set_progress(PROGRESS_REFERENCE)

        intent = self._handoff.build_intent(reference, session, self._payment_method)
        self._set_progress(PROGRESS_URL_REQUESTED)
        url = await self._handoff.request_payment_url(
            intent, snapshot, session, self._auth, saved.contact.phone,
        )
        if not self._is_current(attempt):
            logger.warning("만료된 시도의 결제 URL 폐기: ref=%s", reference)
            return None
        self._metrics.record_payment_url()
        self._set_progress(PROGRESS_URL_RECEIVED)

        notice = (
            messages.WALLET_PAID
            if self._payment_method is PaymentMethod.WALLET
            else messages.REDIRECTING
        )
        await self._notifier.notify(*notice, "success")

        if not await self._wait_redirect_delay(attempt):
            logger.warning("리다이렉트 대기 중 만료/취소: ref=%s", reference)
            return None

        self._transition(CheckoutState.REDIRECTED)
        self._set_progress(PROGRESS_DONE)
        self._timer.cancel()
        session.close("redirected")
        self._redirect_url = url
        self._navigator.open(url)
        return url

    async def _wait_redirect_delay(self, attempt: int) -> bool:
        """리다이렉트 지연 대기. 그 사이 만료/취소되면 False."""
        try:
            await asyncio.wait_for(
                self._abort_event.wait(),
                timeout=self._config.redirect_delay,
            )
            # abort_event가 설정됨
            return False
        except asyncio.TimeoutError:
            return self._is_current(attempt)

    async def _fail_payment(self, attempt: int, error: CheckoutError, title: str) -> None:
        if not self._is_current(attempt):
            logger.info("만료/취소된 시도의 오류 무시: %s", error)
            return
        logger.error("결제 단계 실패: %s", error)
        self._last_error = error
        self._set_progress(0)
        self._transition(CheckoutState.ERROR)
        await self._notifier.notify(title, error.user_message, "error")
        self._transition(CheckoutState.AWAITING_STEP2)

    async def _report_orphan(self, reference: str) -> None:
        """결제 URL 없이 남은 주문 참조번호 전달"""
        logger.warning("결제 URL 미발급 주문: ref=%s", reference)
        self.orphaned_references.append(reference)
        if self._on_orphaned_order is not None:
            await _call_hook(self._on_orphaned_order, reference)

    # ── 만료 / 취소 ──

    def _reset(self, reason: str) -> None:
        """현재 시도 무효화 + 좌석 해제"""
        self._attempt += 1
        self._abort_event.set()
        self._submitting = False
        self._saved_roster = None
        self._store.clear()
        if self._session is not None:
            self._session.close(reason)
        self._set_progress(0)

    async def _handle_expiry(self) -> None:
        """타이머 만료: 좌석 해제 → 만료 알림 → 저장된 경로로 이동"""
        if self._state in (CheckoutState.IDLE, CheckoutState.REDIRECTED):
            return
        logger.warning("예약 만료 (상태: %s)", self._state.name)
        self._metrics.record_expiry()
        self._reset(reason="expired")
        self._expired = True
        self._transition(CheckoutState.IDLE)

        await self._notifier.notify(*messages.RESERVATION_EXPIRED, "error")
        if self._on_expire is not None:
            await _call_hook(self._on_expire)
        else:
            self._route_history.navigate_to_stored_route()

    def cancel(self) -> None:
        """체크아웃 취소 (어느 상태에서나 IDLE로)"""
        if self._state is CheckoutState.IDLE:
            return
        logger.info("체크아웃 취소 (상태: %s)", self._state.name)
        self._timer.cancel()
        self._reset(reason="cancelled")
        self._transition(CheckoutState.IDLE)

    async def close(self) -> None:
        """리소스 정리"""
        self._timer.cancel()
        self._gate.close()
        self._roster.close()
        await self._client.close()
