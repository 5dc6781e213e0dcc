"""Tests for the CI-V engine request/response exchange."""

import pytest

from conftest import IC7100_ADDRESS, IC7300_ADDRESS, MockTransport, ack, nak, reply

from icom_civ.models import (
    VFO,
    Band,
    MemoryChannel,
    Mode,
    RadioBehavior,
    RadioModel,
    VFOModel,
)
from icom_civ.protocol import IcomCIVProtocol
from icom_civ.protocol.errors import (
    CIVTimeout,
    CommandRejected,
    EmptyChannel,
    InvalidParameter,
    MalformedFrame,
    NotConnected,
    UnsupportedOperation,
)
from icom_civ.protocol.frame import build_frame
from icom_civ.protocol.memory import encode_memory_channel


def engine_with(transport, vfo_model: VFOModel) -> IcomCIVProtocol:
    engine = IcomCIVProtocol(transport, IC7300_ADDRESS, RadioBehavior(vfo_model=vfo_model))
    engine.connect()
    return engine


class TestConnection:
    """connect/disconnect lifecycle."""

    def test_connect_opens_and_flushes(self, transport):
        engine = IcomCIVProtocol.for_model(RadioModel.IC7300, transport)
        engine.connect()
        assert engine.connected
        assert transport.is_open
        assert transport.flush_count == 1

    def test_operation_before_connect(self, transport):
        engine = IcomCIVProtocol.for_model(RadioModel.IC7300, transport)
        with pytest.raises(NotConnected):
            engine.set_frequency(14_230_000)
        assert transport.written == []

    def test_operation_after_disconnect(self, radio, transport):
        radio.disconnect()
        assert not transport.is_open
        with pytest.raises(NotConnected):
            radio.get_frequency()

    def test_connect_twice(self, radio, transport):
        """A second connect keeps the open port."""
        radio.connect()
        assert transport.open_count == 1
        assert transport.flush_count == 1
        assert radio.connected

    def test_disconnect_twice(self, radio):
        radio.disconnect()
        radio.disconnect()
        assert not radio.connected

    def test_context_manager(self, transport):
        transport.queue(ack())
        with IcomCIVProtocol.for_model(RadioModel.IC7300, transport) as engine:
            engine.set_ptt(False)
        assert not transport.is_open

    def test_for_model_unknown(self, transport):
        with pytest.raises(InvalidParameter):
            IcomCIVProtocol.for_model("IC-9999", transport)

    def test_for_model_address_override(self, transport):
        engine = IcomCIVProtocol.for_model("IC-7300", transport, civ_address=0x96)
        assert engine.civ_address == 0x96

    def test_address_range(self, transport):
        with pytest.raises(InvalidParameter):
            IcomCIVProtocol(transport, 0x100, RadioBehavior())

    def test_timeout_passed_to_transport(self, transport):
        engine = IcomCIVProtocol.for_model(RadioModel.IC7300, transport, response_timeout=0.25)
        engine.connect()
        transport.queue(ack())
        engine.set_split(True)
        assert transport.timeouts == [0.25]


class TestSetOperations:
    """Set commands require an ACK."""

    def test_set_frequency_on_20m(self, radio, transport):
        """14.230 MHz on an IC-7300: one frame out, ACK back."""
        transport.queue(ack())
        radio.set_frequency(14_230_000)
        assert transport.written == [bytes.fromhex("FEFE94E0050000231400FD")]

    def test_set_power_half(self, radio, transport):
        """50 % power is level 127 on 14 0A."""
        transport.queue(ack())
        radio.set_power(50)
        assert transport.written == [bytes.fromhex("FEFE94E0140A0127FD")]

    def test_nak_rejected(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.set_frequency(14_230_000)
        assert exc_info.value.operation == "set_frequency"
        assert exc_info.value.detail == "NAK"

    def test_non_ack_reply_rejected(self, radio, transport):
        """A data frame where an ACK was due is a rejection too."""
        transport.queue(reply(b"\x03", bytes.fromhex("0000231400")))
        with pytest.raises(CommandRejected):
            radio.set_mode(Mode.USB)

    def test_set_mode_with_filter(self, radio, transport):
        transport.queue(ack())
        radio.set_mode(Mode.LSB)
        assert transport.written == [bytes.fromhex("FEFE94E0060001FD")]

    def test_set_ptt(self, radio, transport):
        transport.queue(ack())
        radio.set_ptt(True)
        assert transport.written == [bytes.fromhex("FEFE94E01C0001FD")]

    def test_timeout(self, radio):
        """No reply at all surfaces as CIVTimeout."""
        with pytest.raises(CIVTimeout):
            radio.set_split(True)

    def test_invalid_frequency_sends_nothing(self, radio, transport):
        with pytest.raises(InvalidParameter):
            radio.set_frequency(-1)
        assert transport.written == []

    def test_write_memory_channel(self, radio, transport):
        channel = MemoryChannel(number=1, frequency=145_500_000, mode=Mode.FM)
        transport.queue(ack())
        radio.write_memory_channel(channel)
        expected = build_frame(IC7300_ADDRESS, b"\x1A\x00", encode_memory_channel(channel))
        assert transport.written == [expected]


class TestGetOperations:
    """Read commands parse the reply."""

    def test_get_frequency(self, radio, transport):
        transport.queue(reply(b"\x03", bytes.fromhex("0040070700")))
        assert radio.get_frequency() == 7_074_000
        assert transport.written == [bytes.fromhex("FEFE94E003FD")]

    def test_get_mode(self, radio, transport):
        transport.queue(reply(b"\x04", b"\x03\x01"))
        assert radio.get_mode() is Mode.CW

    def test_get_power(self, radio, transport):
        transport.queue(reply(b"\x14\x0A", b"\x01\x28"))
        assert radio.get_power() == 50

    def test_get_ptt_and_split(self, radio, transport):
        transport.queue(reply(b"\x1C\x00", b"\x00"), reply(b"\x0F", b"\x01"))
        assert radio.get_ptt() is False
        assert radio.get_split() is True

    def test_signal_strength_s9(self, radio, transport):
        transport.queue(reply(b"\x15\x02", b"\x01\x20"))
        strength = radio.get_signal_strength()
        assert strength.s_units == 9
        assert strength.over_s9_db == 0
        assert str(strength) == "S9"

    def test_signal_strength_over_s9(self, radio, transport):
        transport.queue(reply(b"\x15\x02", b"\x02\x41"))
        assert str(radio.get_signal_strength()) == "S9+60"

    def test_raw_s_meter(self, radio, transport):
        transport.queue(reply(b"\x15\x02", b"\x00\x60"))
        assert radio.get_s_meter() == 60

    def test_get_nak(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.get_power()
        assert exc_info.value.operation == "get_power"

    def test_malformed_reply(self, radio, transport):
        transport.queue(bytes.fromhex("FEFFE09403FD"))
        with pytest.raises(MalformedFrame):
            radio.get_frequency()

    def test_leading_noise_skipped(self, radio, transport):
        """Bytes before the preamble (bus collision residue) are dropped."""
        transport.queue(b"\xFC" + reply(b"\x03", bytes.fromhex("0000231400")))
        assert radio.get_frequency() == 14_230_000

    def test_transceiver_id(self, radio, transport):
        transport.queue(reply(b"\x19", b"\x00\x94"))
        assert radio.read_transceiver_id() == 0x94


class TestVFOComposites:
    """VFO selection ahead of frequency/mode operations."""

    def test_select_then_set(self, radio, transport):
        transport.queue(ack(), ack())
        radio.set_frequency(7_074_000, vfo=VFO.B)
        assert transport.written == [
            bytes.fromhex("FEFE94E00701FD"),
            bytes.fromhex("FEFE94E0050040070700FD"),
        ]

    def test_select_rejected_stops(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.set_frequency(7_074_000, vfo=VFO.A)
        assert exc_info.value.operation == "select_vfo"
        assert len(transport.written) == 1

    def test_main_sub_rejects_a_before_sending(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        with pytest.raises(UnsupportedOperation):
            engine.set_frequency(14_230_000, vfo=VFO.A)
        assert transport.written == []

    def test_main_sub_selects_sub(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        transport.queue(ack(), reply(b"\x04", b"\x01\x01"))
        assert engine.get_mode(vfo=VFO.SUB) is Mode.USB
        assert transport.written[0] == bytes.fromhex("FEFE94E007D1FD")

    def test_none_model_skips_selection(self, transport):
        engine = engine_with(transport, VFOModel.NONE)
        transport.queue(ack())
        engine.set_frequency(14_230_000, vfo=VFO.A)
        assert transport.written == [bytes.fromhex("FEFE94E0050000231400FD")]

    def test_select_vfo_none_model(self, transport):
        """Radios without VFO selection report False and send nothing."""
        engine = engine_with(transport, VFOModel.NONE)
        assert engine.select_vfo(VFO.A) is False
        assert transport.written == []

    def test_select_vfo(self, radio, transport):
        transport.queue(ack())
        assert radio.select_vfo(VFO.B) is True

    def test_select_vfo_unrepresentable(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        with pytest.raises(UnsupportedOperation):
            engine.select_vfo(VFO.B)

    def test_dual_vfo_accepts_all(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(ack(), ack())
        engine.select_vfo(VFO.MAIN)
        engine.select_vfo(VFO.B)
        assert transport.written == [
            bytes.fromhex("FEFE94E007D0FD"),
            bytes.fromhex("FEFE94E00701FD"),
        ]


class TestEchoAbsorption:
    """Radios that copy each command back onto the bus."""

    def test_echo_dropped(self, echo_radio, transport):
        sent = build_frame(IC7100_ADDRESS, b"\x1C\x00", b"\x01")
        transport.queue(sent, ack(IC7100_ADDRESS))
        echo_radio.set_ptt(True)
        assert transport.written == [sent]
        assert transport.responses == []

    def test_echo_then_data(self, echo_radio, transport):
        transport.queue(
            build_frame(IC7100_ADDRESS, b"\x03"),
            reply(b"\x03", bytes.fromhex("0000231400"), source=IC7100_ADDRESS),
        )
        assert echo_radio.get_frequency() == 14_230_000

    def test_echoed_subcommand_in_reply(self, echo_radio, transport):
        transport.queue(
            build_frame(IC7100_ADDRESS, b"\x14\x0A"),
            reply(b"\x14\x0A", b"\x0A\x01\x28", source=IC7100_ADDRESS),
        )
        assert echo_radio.get_power() == 50

    def test_reply_without_echo_accepted(self, echo_radio, transport):
        transport.queue(ack(IC7100_ADDRESS))
        echo_radio.set_split(False)

    def test_only_one_echo_absorbed(self, echo_radio, transport):
        sent = build_frame(IC7100_ADDRESS, b"\x0F", b"\x01")
        transport.queue(sent, sent, ack(IC7100_ADDRESS))
        with pytest.raises(CommandRejected):
            echo_radio.set_split(True)

    def test_echo_not_absorbed_without_flag(self, radio, transport):
        """A non-echoing radio treats an echo as the reply."""
        sent = build_frame(IC7300_ADDRESS, b"\x1C\x00", b"\x01")
        transport.queue(sent, ack())
        with pytest.raises(CommandRejected):
            radio.set_ptt(True)

    def test_mode_without_filter_byte(self, echo_radio, transport):
        sent = build_frame(IC7100_ADDRESS, b"\x06", b"\x05")
        transport.queue(sent, ack(IC7100_ADDRESS))
        echo_radio.set_mode(Mode.FM)
        assert transport.written == [sent]

    def test_echo_then_silence(self, echo_radio, transport):
        """An absorbed echo does not count as the reply."""
        transport.queue(build_frame(IC7100_ADDRESS, b"\x0F", b"\x01"))
        with pytest.raises(CIVTimeout):
            echo_radio.set_split(True)
        assert len(transport.written) == 1


class TestRITXIT:
    """Offset-then-enable composites."""

    def test_set_rit(self, radio, transport):
        transport.queue(ack(), ack())
        radio.set_rit(True, 500)
        assert transport.written == [
            bytes.fromhex("FEFE94E02100000500FD"),
            bytes.fromhex("FEFE94E0210101FD"),
        ]

    def test_rit_offset_rejected(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.set_rit(True, 500)
        assert exc_info.value.operation == "set_rit_offset"
        assert len(transport.written) == 1

    def test_rit_enable_rejected(self, radio, transport):
        transport.queue(ack(), nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.set_rit(True, -120)
        assert exc_info.value.operation == "set_rit_enabled"
        assert len(transport.written) == 2

    def test_rit_offset_out_of_range(self, radio, transport):
        with pytest.raises(InvalidParameter):
            radio.set_rit(True, 10_000)
        assert transport.written == []

    def test_get_rit(self, radio, transport):
        transport.queue(reply(b"\x21", b"\x00\x50\x00\x80"), reply(b"\x21", b"\x01\x01"))
        state = radio.get_rit()
        assert state.enabled is True
        assert state.offset_hz == -50

    def test_set_xit(self, radio, transport):
        transport.queue(ack(), ack())
        radio.set_xit(True, -250)
        assert transport.written == [
            bytes.fromhex("FEFE94E02100500280FD"),
            bytes.fromhex("FEFE94E0210201FD"),
        ]

    def test_xit_unsupported(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(UnsupportedOperation):
            radio.set_xit(True, 100)
        assert len(transport.written) == 1

    def test_xit_enable_rejected(self, radio, transport):
        transport.queue(ack(), nak())
        with pytest.raises(CommandRejected) as exc_info:
            radio.set_xit(False)
        assert exc_info.value.operation == "set_xit_enabled"

    def test_get_xit(self, radio, transport):
        transport.queue(reply(b"\x21", b"\x02\x00"), reply(b"\x21", b"\x00\x00\x01\x00"))
        state = radio.get_xit()
        assert state.enabled is False
        assert state.offset_hz == 100

    def test_get_xit_unsupported(self, radio, transport):
        transport.queue(nak())
        with pytest.raises(UnsupportedOperation):
            radio.get_xit()


class TestCompositeTimeouts:
    """A timeout on any frame stops the remaining frames."""

    def test_vfo_selection_timeout(self, radio, transport):
        with pytest.raises(CIVTimeout):
            radio.set_frequency(7_074_000, vfo=VFO.B)
        assert transport.written == [bytes.fromhex("FEFE94E00701FD")]

    def test_rit_offset_timeout(self, radio, transport):
        with pytest.raises(CIVTimeout):
            radio.set_rit(True, 50)
        assert transport.written == [bytes.fromhex("FEFE94E02100500000FD")]

    def test_xit_offset_timeout(self, radio, transport):
        with pytest.raises(CIVTimeout):
            radio.set_xit(True, 50)
        assert len(transport.written) == 1

    def test_band_vfo_timeout(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        with pytest.raises(CIVTimeout):
            engine.select_band_vfo(Band.SUB, VFO.B)
        assert transport.written == [bytes.fromhex("FEFE94E007D1FD")]


class TestDualReceiver:
    """Main/Sub band commands."""

    def test_select_band(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        transport.queue(ack(), ack())
        engine.select_band(Band.SUB)
        engine.select_band(Band.MAIN)
        assert transport.written == [
            bytes.fromhex("FEFE94E007D1FD"),
            bytes.fromhex("FEFE94E007D0FD"),
        ]

    def test_exchange_bands(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        transport.queue(ack())
        engine.exchange_bands()
        assert transport.written == [bytes.fromhex("FEFE94E007B0FD")]

    def test_dualwatch(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(ack(), ack())
        engine.set_dualwatch(True)
        engine.set_dualwatch(False)
        assert transport.written == [
            bytes.fromhex("FEFE94E007C1FD"),
            bytes.fromhex("FEFE94E007C0FD"),
        ]

    def test_single_receiver_rejected_before_sending(self, radio, transport):
        for operation in (
            lambda: radio.select_band(Band.MAIN),
            radio.exchange_bands,
            lambda: radio.set_dualwatch(True),
        ):
            with pytest.raises(UnsupportedOperation):
                operation()
        assert transport.written == []

    def test_dualwatch_rejected(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            engine.set_dualwatch(True)
        assert exc_info.value.operation == "set_dualwatch"


class TestBandVFO:
    """Band plus A/B selection on radios with VFOs per band."""

    def test_main_a(self):
        transport = MockTransport([ack(0xA2), ack(0xA2)])
        engine = IcomCIVProtocol.for_model(RadioModel.IC9700, transport)
        engine.connect()
        engine.select_band_vfo(Band.MAIN, VFO.A)
        assert transport.written == [
            bytes.fromhex("FEFEA2E007D0FD"),
            bytes.fromhex("FEFEA2E00700FD"),
        ]

    def test_sub_b(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(ack(), ack())
        engine.select_band_vfo(Band.SUB, VFO.B)
        assert transport.written == [
            bytes.fromhex("FEFE94E007D1FD"),
            bytes.fromhex("FEFE94E00701FD"),
        ]

    def test_band_rejected_stops(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(nak())
        with pytest.raises(CommandRejected) as exc_info:
            engine.select_band_vfo(Band.MAIN, VFO.B)
        assert exc_info.value.operation == "select_band"
        assert len(transport.written) == 1

    def test_vfo_rejected(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(ack(), nak())
        with pytest.raises(CommandRejected) as exc_info:
            engine.select_band_vfo(Band.MAIN, VFO.B)
        assert exc_info.value.operation == "select_vfo"

    def test_main_sub_radio_unsupported(self, transport):
        """Two-state Main/Sub radios have no A/B per band."""
        engine = engine_with(transport, VFOModel.MAIN_SUB)
        with pytest.raises(UnsupportedOperation):
            engine.select_band_vfo(Band.MAIN, VFO.A)
        with pytest.raises(UnsupportedOperation):
            engine.equalize_vfos()
        assert transport.written == []

    def test_vfo_must_be_a_or_b(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        with pytest.raises(UnsupportedOperation):
            engine.select_band_vfo(Band.MAIN, VFO.SUB)
        assert transport.written == []

    def test_equalize_vfos(self, transport):
        engine = engine_with(transport, VFOModel.MAIN_SUB_DUAL_VFO)
        transport.queue(ack())
        engine.equalize_vfos()
        assert transport.written == [bytes.fromhex("FEFE94E007A0FD")]


class TestMemory:
    """Memory channel read through the engine."""

    def test_read_channel(self, radio, transport):
        channel = MemoryChannel(
            number=12,
            frequency=145_500_000,
            mode=Mode.FM,
            duplex_offset_hz=-600_000,
            tone_hz=88.5,
            name="RPT",
        )
        transport.queue(reply(b"\x1A", b"\x00" + encode_memory_channel(channel)))
        result = radio.read_memory_channel(12)
        assert result.frequency == 145_500_000
        assert result.duplex_offset_hz == -600_000
        assert result.name == "RPT"
        assert transport.written == [bytes.fromhex("FEFE94E01A000012FD")]

    def test_empty_channel(self, radio, transport):
        transport.queue(reply(b"\x1A", b"\x00\x00\x99\xFF"))
        with pytest.raises(EmptyChannel) as exc_info:
            radio.read_memory_channel(99)
        assert exc_info.value.channel == 99


class TestFourByteModel:
    """IC-735 override through the registry."""

    def test_set_frequency(self):
        transport = MockTransport([ack(0x04)])
        engine = IcomCIVProtocol.for_model(RadioModel.IC735, transport)
        engine.connect()
        engine.set_frequency(7_050_000)
        assert transport.written == [bytes.fromhex("FEFE04E00500000507FD")]
