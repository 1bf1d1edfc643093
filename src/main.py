"""버스 승차권 체크아웃 - CLI 진입점

사용 예시:
    python -m src.main --snapshot service.json --seats 12,14:f \
        --passengers passengers.json --hold-token <redisKey> \
        --ticket-token <srvNo> --service-token <coToken>

    --passengers를 생략하면 좌석별로 승객 정보를 대화형으로 입력한다.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from src.agent.state import CheckoutState
from src.agents.orchestrator import CheckoutOrchestrator
from src.models.config import CheckoutConfig
from src.models.order import PaymentMethod
from src.models.seat import Gender, Seat, SeatState
from src.skills.parser import ParserSkill
from src.skills.snapshot import StaticSnapshotProvider
from src.utils.auth_session import AuthSession
from src.utils.logging_config import setup_logging


BANNER = r"""
  ╔══════════════════════════════════════════════╗
  ║   Bilit 버스 승차권 체크아웃                 ║
  ║   Seat → Passengers → Payment                ║
  ╚══════════════════════════════════════════════╝
"""

# 대화형 입력 항목: (필드, 안내 문구, 필수 여부)
_PROMPTS: tuple[tuple[str, str, bool], ...] = (
    ("name", "이름 (페르시아어)", True),
    ("family", "성 (페르시아어)", True),
    ("national_id", "신분번호 10자리", True),
    ("phone", "휴대폰 (선택)", False),
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="버스 승차권 좌석 예약 및 결제 이관",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "예시:\n"
            "  python -m src.main --snapshot service.json --seats 12,14:f "
            "--hold-token KEY --ticket-token 1234 --service-token TOKEN"
        ),
    )
    p.add_argument("--snapshot", required=True, help="서비스 상세 JSON 파일")
    p.add_argument("--seats", required=True, help="좌석 번호 (예: 12,14:f)")
    p.add_argument("--passengers", default=None, help="승객 JSON 파일 (생략 시 대화형)")
    p.add_argument("--hold-token", required=True, help="좌석 홀드 토큰 (redisKey)")
    p.add_argument("--ticket-token", default="", help="티켓 토큰 (서비스 번호)")
    p.add_argument("--service-token", default="", help="서비스 토큰 (coToken)")
    p.add_argument("--asset-id", default=None, help="주문 자산 ID")
    p.add_argument("--auth", default=None, help="인증 JSON 파일 (생략 시 환경변수)")
    p.add_argument(
        "--payment-method",
        default="gateway",
        choices=[m.value for m in PaymentMethod],
        help="결제 수단 (기본: gateway)",
    )
    p.add_argument(
        "--timer",
        type=float,
        default=None,
        help="예약 유지 시간 초 (기본: 900)",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    p.add_argument("--log-file", default=None, help="로그 파일 경로")
    return p


def load_seat_map(path: str | Path, wanted: list[str]) -> list[Seat]:
    """스냅샷 파일의 Seats 배열 → Seat 목록

    배열이 없으면 요청 좌석만 빈 좌석으로 구성한다.
    """
    data: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
    items = data.get("Seats") or []
    if items:
        return [Seat.from_api(item) for item in items]
    return [Seat(seat_id=int(no), seat_no=no) for no in wanted]


def find_seat_id(orchestrator: CheckoutOrchestrator, seat_no: str) -> Optional[int]:
    for seat in orchestrator.store.seats:
        if seat.seat_no == seat_no:
            return seat.seat_id
    return None


def select_seats(
    orchestrator: CheckoutOrchestrator,
    wanted: list[tuple[str, Gender]],
) -> dict[str, int]:
    """좌석 클릭 시뮬레이션 (여성은 두 번 클릭)"""
    selected: dict[str, int] = {}
    target = {Gender.MALE: SeatState.SELECTED_MALE, Gender.FEMALE: SeatState.SELECTED_FEMALE}
    for seat_no, gender in wanted:
        seat_id = find_seat_id(orchestrator, seat_no)
        if seat_id is None:
            print(f"  [오류] 좌석 {seat_no} 없음")
            continue
        state = orchestrator.select_seat(seat_id)
        if gender is Gender.FEMALE and state is SeatState.SELECTED_MALE:
            state = orchestrator.select_seat(seat_id)
        if state is target[gender]:
            selected[seat_no] = seat_id
        else:
            print(f"  [오류] 좌석 {seat_no} 선택 불가 ({state.value})")
    return selected


def apply_passengers(
    orchestrator: CheckoutOrchestrator,
    selected: dict[str, int],
    entries: list[tuple[str, dict[str, str]]],
) -> None:
    for seat_no, fields in entries:
        seat_id = selected.get(seat_no)
        if seat_id is None:
            print(f"  [경고] 선택되지 않은 좌석의 승객 무시: {seat_no}")
            continue
        for field, value in fields.items():
            orchestrator.set_passenger_field(seat_id, field, value)


async def prompt_passengers(
    orchestrator: CheckoutOrchestrator,
    selected: dict[str, int],
) -> None:
    """좌석별 대화형 입력 (오류 시 재입력)"""
    for seat_no, seat_id in selected.items():
        print(f"\n  ── 좌석 {seat_no} ──")
        for field, label, required in _PROMPTS:
            while orchestrator.state is CheckoutState.SELECTING_SEATS:
                value = await asyncio.to_thread(input, f"  {label}: ")
                if not value.strip() and not required:
                    break
                if orchestrator.set_passenger_field(seat_id, field, value):
                    break
                record = orchestrator.roster.record(seat_id)
                print(f"  [오류] {record.errors.get(field, '')}")


def print_roster_errors(orchestrator: CheckoutOrchestrator) -> None:
    for record in orchestrator.roster.records:
        for field, message in record.errors.items():
            print(f"  [좌석 {record.seat_no}] {field}: {message}")
        for field, message in record.warnings.items():
            print(f"  [좌석 {record.seat_no}] (경고) {field}: {message}")


async def run(args: argparse.Namespace, config: CheckoutConfig) -> int:
    auth = AuthSession.from_file(args.auth) if args.auth else AuthSession.from_env()
    provider = StaticSnapshotProvider.from_file(args.snapshot)
    wanted = ParserSkill.parse_seats(args.seats)

    orchestrator = CheckoutOrchestrator(
        config,
        auth=auth,
        snapshot_provider=provider,
        asset_id=args.asset_id,
        on_orphaned_order=lambda ref: print(f"  [주의] 결제 URL 없이 생성된 주문: {ref}"),
    )

    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        print("\n\n  Ctrl+C 감지 - 체크아웃 취소 중...")
        orchestrator.cancel()

    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGINT, _signal_handler)
        loop.add_signal_handler(signal.SIGTERM, _signal_handler)

    try:
        orchestrator.store.load_seats(
            load_seat_map(args.snapshot, [no for no, _ in wanted])
        )
        orchestrator.start_session(args.ticket_token, args.service_token, args.hold_token)
        print(f"  남은 시간: {orchestrator.timer.format_remaining()}")

        selected = select_seats(orchestrator, wanted)
        if not selected:
            print("  선택된 좌석이 없습니다")
            return 1

        if args.passengers:
            apply_passengers(orchestrator, selected, ParserSkill.load_passengers(args.passengers))
        else:
            await prompt_passengers(orchestrator, selected)

        if not await orchestrator.submit_passengers():
            print_roster_errors(orchestrator)
            return 1

        orchestrator.choose_payment_method(args.payment_method)
        url = await orchestrator.confirm_payment()
        if url is None:
            return 1
        print(f"\n  결제 페이지: {url}")
        return 0
    finally:
        print(f"\n{orchestrator.metrics.summary()}")
        await orchestrator.close()


def cli_entry() -> None:
    """CLI 진입점 (pyproject.toml scripts에서 호출)"""
    main()


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
    )

    overrides: dict[str, Any] = {}
    if args.timer is not None:
        overrides["reservation_seconds"] = args.timer
    config = CheckoutConfig.from_env(**overrides)

    print(BANNER)

    try:
        code = asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print("\n  프로그램 종료")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
