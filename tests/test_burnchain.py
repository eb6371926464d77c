"""
Tests for the burnchain configuration store and the cycle clock.
"""
import pytest

import pox4_contract_config as cfg
from pox4_burnchain import (
    burn_height_to_reward_cycle,
    current_pox_reward_cycle,
    get_burnchain_config,
    reward_cycle_to_burn_height,
    set_burnchain_parameters,
)
from pox4_errors import ERR_NOT_ALLOWED, PoxAbort, PoxError

SENDER = b"wallet_1"


def configure(host, first=100, prepare=5, cycle=20, begin=6):
    with host.transaction(SENDER):
        return set_burnchain_parameters(host.state, first, prepare, cycle, begin)


class TestSetBurnchainParameters:
    """One-time configuration."""

    def test_defaults_before_configuration(self, host):
        config = get_burnchain_config(host.state)
        assert config.first_burnchain_block_height == 0
        assert config.prepare_cycle_length == cfg.DEFAULT_PREPARE_CYCLE_LENGTH
        assert config.reward_cycle_length == 1050
        assert config.configured == 0

    def test_sets_the_parameters(self, host):
        assert configure(host) is True
        config = get_burnchain_config(host.state)
        assert config.first_burnchain_block_height == 100
        assert config.prepare_cycle_length == 5
        assert config.reward_cycle_length == 20
        assert config.first_pox4_reward_cycle == 6
        assert config.configured == 1

    def test_cannot_be_called_twice(self, host):
        configure(host)
        with pytest.raises(PoxError) as exc:
            configure(host, first=101, prepare=6, cycle=21, begin=7)
        assert exc.value.code == ERR_NOT_ALLOWED

        config = get_burnchain_config(host.state)
        assert config.first_burnchain_block_height == 100
        assert config.prepare_cycle_length == 5
        assert config.reward_cycle_length == 20
        assert config.first_pox4_reward_cycle == 6

    def test_zero_prepare_length_aborts(self, host):
        with pytest.raises(PoxAbort):
            configure(host, prepare=0)
        assert get_burnchain_config(host.state).configured == 0

    def test_cycle_not_longer_than_prepare_aborts(self, host):
        with pytest.raises(PoxAbort):
            configure(host, prepare=20, cycle=20)
        # Abort does not burn the one-time write
        assert configure(host) is True

    def test_all_zero_parameters_abort(self, host):
        with pytest.raises(PoxAbort):
            configure(host, first=0, prepare=0, cycle=0, begin=0)
        config = get_burnchain_config(host.state)
        assert config.configured == 0
        assert config.reward_cycle_length == 1050
        assert burn_height_to_reward_cycle(host.state, 2100) == 2

    def test_abort_is_not_a_typed_error(self, host):
        with pytest.raises(PoxAbort) as exc:
            configure(host, prepare=0)
        assert not isinstance(exc.value, PoxError)


class TestBurnHeightToRewardCycle:
    """Height -> cycle mapping."""

    @pytest.mark.parametrize("height,cycle", [(0, 0), (1, 0), (1049, 0), (1050, 1), (2099, 1), (2100, 2), (2101, 2)])
    def test_default_configuration(self, host, height, cycle):
        assert burn_height_to_reward_cycle(host.state, height) == cycle

    @pytest.mark.parametrize("height,cycle", [(100, 0), (101, 0), (119, 0), (120, 1), (121, 1), (139, 1), (140, 2)])
    def test_modified_configuration(self, host, height, cycle):
        configure(host)
        assert burn_height_to_reward_cycle(host.state, height) == cycle

    @pytest.mark.parametrize("height", [0, 1, 50, 99])
    def test_height_before_first_block_aborts(self, host, height):
        configure(host)
        with pytest.raises(PoxAbort):
            burn_height_to_reward_cycle(host.state, height)

    def test_negative_height_aborts(self, host):
        with pytest.raises(PoxAbort):
            burn_height_to_reward_cycle(host.state, -1)

    def test_monotonic_in_height(self, host):
        configure(host)
        cycles = [burn_height_to_reward_cycle(host.state, h) for h in range(100, 400)]
        assert cycles == sorted(cycles)


class TestRewardCycleToBurnHeight:
    """Cycle -> first height mapping."""

    @pytest.mark.parametrize("cycle,height", [(0, 0), (1, 1050), (2, 2100)])
    def test_default_configuration(self, host, cycle, height):
        assert reward_cycle_to_burn_height(host.state, cycle) == height

    def test_modified_configuration(self, host):
        configure(host)
        assert reward_cycle_to_burn_height(host.state, 0) == 100
        assert reward_cycle_to_burn_height(host.state, 3) == 160

    def test_overflow_aborts(self, host):
        with pytest.raises(PoxAbort):
            reward_cycle_to_burn_height(host.state, cfg.UINT_MAX)

    def test_largest_representable_height(self, host):
        cycle = cfg.UINT_MAX // 1050
        assert reward_cycle_to_burn_height(host.state, cycle) == cycle * 1050

    def test_round_trip(self, host):
        for cycle in range(0, 200):
            assert burn_height_to_reward_cycle(host.state, reward_cycle_to_burn_height(host.state, cycle)) == cycle
        configure(host)
        for cycle in range(0, 200):
            assert burn_height_to_reward_cycle(host.state, reward_cycle_to_burn_height(host.state, cycle)) == cycle


class TestCurrentPoxRewardCycle:
    """Current cycle follows the host's burn height."""

    def test_advances_with_blocks(self, host):
        assert host.call_read_only(current_pox_reward_cycle, SENDER) == 0
        host.mine_empty_blocks(2099)
        assert host.call_read_only(current_pox_reward_cycle, SENDER) == 1
        host.mine_empty_blocks()
        assert host.call_read_only(current_pox_reward_cycle, SENDER) == 2
