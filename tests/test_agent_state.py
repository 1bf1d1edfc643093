"""체크아웃 상태 머신 단위 테스트"""

import pytest

from src.agent.state import CheckoutState, validate_transition


class TestStateTransitions:
    def test_idle_to_selecting(self):
        assert validate_transition(CheckoutState.IDLE, CheckoutState.SELECTING_SEATS)

    def test_selecting_to_saving(self):
        assert validate_transition(
            CheckoutState.SELECTING_SEATS, CheckoutState.SAVING_PASSENGERS
        )

    def test_saving_to_step2(self):
        assert validate_transition(
            CheckoutState.SAVING_PASSENGERS, CheckoutState.AWAITING_STEP2
        )

    def test_step2_to_paying(self):
        assert validate_transition(CheckoutState.AWAITING_STEP2, CheckoutState.PAYING)

    def test_step2_back_to_selecting(self):
        assert validate_transition(
            CheckoutState.AWAITING_STEP2, CheckoutState.SELECTING_SEATS
        )

    def test_paying_to_redirected(self):
        assert validate_transition(CheckoutState.PAYING, CheckoutState.REDIRECTED)

    def test_error_recovers_to_step2(self):
        assert validate_transition(CheckoutState.ERROR, CheckoutState.AWAITING_STEP2)

    def test_error_recovers_to_selecting(self):
        assert validate_transition(CheckoutState.ERROR, CheckoutState.SELECTING_SEATS)

    def test_invalid_idle_to_paying(self):
        assert not validate_transition(CheckoutState.IDLE, CheckoutState.PAYING)

    def test_invalid_selecting_to_paying(self):
        """승객 저장 없이 결제 단계로 건너뛸 수 없다"""
        assert not validate_transition(
            CheckoutState.SELECTING_SEATS, CheckoutState.PAYING
        )

    def test_invalid_redirected_to_paying(self):
        assert not validate_transition(CheckoutState.REDIRECTED, CheckoutState.PAYING)

    def test_invalid_saving_to_selecting(self):
        assert not validate_transition(
            CheckoutState.SAVING_PASSENGERS, CheckoutState.SELECTING_SEATS
        )

    @pytest.mark.parametrize("state", list(CheckoutState))
    def test_error_reachable_from_any_state(self, state):
        assert validate_transition(state, CheckoutState.ERROR)

    @pytest.mark.parametrize("state", list(CheckoutState))
    def test_idle_reachable_from_any_state(self, state):
        assert validate_transition(state, CheckoutState.IDLE)
