"""
Tests for ventilator breath generation.
Validates breath timing, flow integration, lung mechanics effects and loop output.
"""
import pytest
import numpy as np
from physio_simulator.api_models import FlowShape, VentilationMode, VentilatorParams
from physio_simulator.ventilator_mechanics import (
    compute_breath_timing,
    effective_compliance,
    generate_ventilator_breath,
    muscle_pressure,
)

def _inspiration_mask(scalars, params):
    timing = compute_breath_timing(params.rr, params.ie_ratio)
    steps = np.arange(len(scalars["time"])) * 0.02
    return (steps % timing.cycle_time) < timing.inspiration_time, steps, timing

class TestBreathTiming:
    """Test phase boundary computation."""

    @pytest.mark.medical
    def test_default_timing(self):
        timing = compute_breath_timing(15, 2)
        assert timing.cycle_time == pytest.approx(4.0)
        assert timing.inspiration_time == pytest.approx(4.0 / 3)
        assert timing.expiration_time == pytest.approx(8.0 / 3)

    @pytest.mark.medical
    @pytest.mark.parametrize("rr, ie_ratio", [(10, 1), (20, 1.5), (40, 4)])
    def test_phases_fill_cycle(self, rr, ie_ratio):
        timing = compute_breath_timing(rr, ie_ratio)
        assert timing.inspiration_time + timing.expiration_time == pytest.approx(timing.cycle_time)
        assert timing.expiration_time / timing.inspiration_time == pytest.approx(ie_ratio)


class TestLungMechanics:
    """Test muscle effort and compliance helpers."""

    @pytest.mark.medical
    def test_no_effort_means_no_muscle_pressure(self):
        assert muscle_pressure(3.9, 3.9, 4.0, 0.0) == 0.0

    @pytest.mark.medical
    def test_effort_is_negative_near_cycle_boundary(self):
        assert muscle_pressure(3.95, 3.95, 4.0, 5.0) < 0
        assert muscle_pressure(0.05, 4.05, 4.0, 5.0) < 0

    @pytest.mark.medical
    def test_effort_inactive_mid_cycle_and_at_start(self):
        assert muscle_pressure(2.0, 2.0, 4.0, 5.0) == 0.0
        # No effort at the very start of the simulation
        assert muscle_pressure(0.0, 0.0, 4.0, 5.0) == 0.0

    @pytest.mark.medical
    def test_compliance_unchanged_below_threshold(self):
        assert effective_compliance(50, 0.4, True) == 50
        assert effective_compliance(50, 0.7, False) == 50

    @pytest.mark.medical
    def test_compliance_drops_past_threshold(self):
        assert effective_compliance(50, 0.55, True) == pytest.approx(50 * (1 - 0.1 * 2))

    @pytest.mark.medical
    def test_compliance_floor(self):
        assert effective_compliance(50, 2.0, True) == 5


class TestVentilatorBreath:
    """Test full two-cycle generation."""

    @pytest.mark.medical
    def test_sequence_length_is_two_cycles(self, default_ventilator_params):
        breath = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, default_ventilator_params)
        assert len(breath["scalars"]["time"]) == 400
        for key in ("pressure", "flow", "volume"):
            assert len(breath["scalars"][key]) == 400
            assert len(breath["loops"][key]) == 400

    @pytest.mark.medical
    def test_loops_match_scalars(self, default_ventilator_params):
        breath = generate_ventilator_breath(VentilationMode.PRESSURE_CONTROL, default_ventilator_params)
        for key in ("pressure", "flow", "volume"):
            np.testing.assert_array_equal(breath["scalars"][key], breath["loops"][key])
        assert "time" not in breath["loops"]

    @pytest.mark.medical
    @pytest.mark.parametrize("resistance, compliance", [(5, 20), (10, 50), (30, 100), (50, 10)])
    def test_square_flow_delivers_tidal_volume(self, square_vc_params, tolerance_config, resistance, compliance):
        params = square_vc_params.model_copy(update={"resistance": resistance, "compliance": compliance})
        breath = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, params)
        scalars = breath["scalars"]
        inspiration, steps, timing = _inspiration_mask(scalars, params)

        for cycle in range(2):
            in_cycle = (steps >= cycle * timing.cycle_time) & (steps < (cycle + 1) * timing.cycle_time)
            peak = np.max(scalars["volume"][in_cycle & inspiration])
            assert abs(peak - 500) < tolerance_config['tidal_volume_tolerance_ml']

    @pytest.mark.medical
    def test_decelerating_flow_delivers_same_volume(self, square_vc_params, tolerance_config):
        decelerating = square_vc_params.model_copy(update={"flow_shape": FlowShape.DECELERATING})
        square_peak = np.max(generate_ventilator_breath("VC", square_vc_params)["scalars"]["volume"])
        decel_peak = np.max(generate_ventilator_breath("VC", decelerating)["scalars"]["volume"])
        assert abs(decel_peak - square_peak) < tolerance_config['tidal_volume_tolerance_ml']

    @pytest.mark.medical
    def test_decelerating_flow_ramps_down(self, square_vc_params):
        params = square_vc_params.model_copy(update={"flow_shape": FlowShape.DECELERATING})
        scalars = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, params)["scalars"]
        inspiration, _, _ = _inspiration_mask(scalars, params)
        first_breath_flow = scalars["flow"][:np.argmin(inspiration)]
        assert np.all(np.diff(first_breath_flow) < 0)
        # Starts at twice the square-equivalent flow (L/min)
        assert first_breath_flow[0] == pytest.approx(2 * 0.5 / (4.0 / 3) * 60)

    @pytest.mark.medical
    def test_square_flow_constant_during_inspiration(self, square_vc_params):
        scalars = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, square_vc_params)["scalars"]
        inspiration, _, _ = _inspiration_mask(scalars, square_vc_params)
        np.testing.assert_allclose(scalars["flow"][inspiration], 0.5 / (4.0 / 3) * 60)

    @pytest.mark.medical
    def test_expiratory_flow_is_negative(self, square_vc_params):
        scalars = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, square_vc_params)["scalars"]
        inspiration, _, _ = _inspiration_mask(scalars, square_vc_params)
        assert np.all(scalars["flow"][~inspiration] <= 0)

    @pytest.mark.medical
    def test_volume_never_negative(self):
        for mode in VentilationMode:
            for shape in FlowShape:
                params = VentilatorParams(flow_shape=shape, resistance=5, compliance=10, auto_peep=True)
                scalars = generate_ventilator_breath(mode, params)["scalars"]
                assert np.all(scalars["volume"] >= 0)

    @pytest.mark.medical
    def test_pressure_control_pins_inspiratory_pressure(self, default_ventilator_params):
        scalars = generate_ventilator_breath(VentilationMode.PRESSURE_CONTROL, default_ventilator_params)["scalars"]
        inspiration, _, _ = _inspiration_mask(scalars, default_ventilator_params)
        np.testing.assert_allclose(scalars["pressure"][inspiration], 5 + 15)

    @pytest.mark.medical
    def test_pressure_control_flow_decays(self, default_ventilator_params):
        scalars = generate_ventilator_breath(VentilationMode.PRESSURE_CONTROL, default_ventilator_params)["scalars"]
        # Initial flow is (P / R) L/s
        assert scalars["flow"][0] == pytest.approx(15 / 10 * 60)
        tau = 10 * 50 / 1000
        assert scalars["flow"][10] == pytest.approx(15 / 10 * 60 * np.exp(-0.2 / tau))

    @pytest.mark.medical
    def test_overdistension_raises_pressure_past_threshold(self, square_vc_params):
        base = square_vc_params.model_copy(update={"tidal_volume": 700})
        stiff = base.model_copy(update={"overdistension": True})
        normal = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, base)["scalars"]
        beaked = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, stiff)["scalars"]

        # Volume trajectory is set by the ventilator, not by the lung
        np.testing.assert_allclose(normal["volume"], beaked["volume"])
        past_threshold = normal["volume"] > 450
        below_threshold = normal["volume"] <= 450
        assert np.any(past_threshold)
        assert np.all(beaked["pressure"][past_threshold] > normal["pressure"][past_threshold])
        np.testing.assert_allclose(beaked["pressure"][below_threshold], normal["pressure"][below_threshold])

    @pytest.mark.medical
    def test_auto_peep_starts_breath_with_trapped_volume(self, square_vc_params):
        trapped = square_vc_params.model_copy(update={"auto_peep": True})
        normal = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, square_vc_params)["scalars"]
        air_trapping = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, trapped)["scalars"]
        assert air_trapping["volume"][0] == pytest.approx(normal["volume"][0] + 100)
        assert np.max(air_trapping["volume"]) > np.max(normal["volume"])

    @pytest.mark.medical
    def test_trigger_effort_dips_pressure(self, square_vc_params):
        triggered = square_vc_params.model_copy(update={"trigger_effort": 5})
        normal = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, square_vc_params)["scalars"]
        effort = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, triggered)["scalars"]
        # Just before the second breath (t = 4 s) the patient pulls pressure down
        pre_trigger = (normal["time"] > 3.86) & (normal["time"] < 4.0)
        assert np.all(effort["pressure"][pre_trigger] < normal["pressure"][pre_trigger])

    @pytest.mark.medical
    def test_time_axis_is_rounded_steps(self, default_ventilator_params):
        times = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, default_ventilator_params)["scalars"]["time"]
        assert times[0] == 0.0
        np.testing.assert_allclose(np.diff(times), 0.02, atol=1e-9)

    @pytest.mark.medical
    def test_generation_is_idempotent(self, default_ventilator_params):
        first = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, default_ventilator_params)
        second = generate_ventilator_breath(VentilationMode.VOLUME_CONTROL, default_ventilator_params)
        for key in ("time", "pressure", "flow", "volume"):
            np.testing.assert_array_equal(first["scalars"][key], second["scalars"][key])
