import threading

import pytest
import serial

from lidartools.gps_sync import (
    BaudRate,
    Parity,
    RmcParser,
    Synchro,
    serial_settings,
)

GPRMC = b"$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"
GNRMC = b"$GNRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*74"


def test_settings_8n1():
    assert serial_settings(BaudRate.BR9600, Parity.P_8N1) == {
        "baudrate": 9600,
        "bytesize": serial.EIGHTBITS,
        "parity": serial.PARITY_NONE,
        "stopbits": serial.STOPBITS_ONE,
    }


@pytest.mark.parametrize(
    "parity, bytesize, flag",
    [
        (Parity.P_7E1, serial.SEVENBITS, serial.PARITY_EVEN),
        (Parity.P_7O1, serial.SEVENBITS, serial.PARITY_ODD),
        (Parity.P_7S1, serial.EIGHTBITS, serial.PARITY_NONE),
    ],
)
def test_settings_framing(parity, bytesize, flag):
    settings = serial_settings(BaudRate.BR115200, parity)
    assert settings["bytesize"] == bytesize
    assert settings["parity"] == flag
    assert settings["baudrate"] == 115200


def test_settings_rejects_unknown_parity():
    with pytest.raises(ValueError):
        serial_settings(BaudRate.BR9600, "9X9")


def test_highest_baud_rate_setting():
    settings = serial_settings(BaudRate.BR4000000, Parity.P_8N1)
    assert settings["baudrate"] == 4000000


def test_decode_valid_gprmc():
    parser = RmcParser()
    assert parser.decode(GPRMC) == [GPRMC]


def test_decode_valid_gnrmc():
    parser = RmcParser()
    assert parser.decode(GNRMC) == [GNRMC]


def test_lowercase_checksum_accepted():
    sentence = GPRMC[:-2] + b"6a"
    assert RmcParser().decode(sentence) == [sentence]


def test_bad_checksum_rejected():
    parser = RmcParser()
    assert parser.decode(GPRMC[:-2] + b"6B") == []


def test_other_sentence_ignored():
    sentence = b"$GPGGA" + GPRMC[6:]
    assert RmcParser().decode(sentence) == []


def test_noise_before_sentence_skipped():
    parser = RmcParser()
    assert parser.decode(b"xx$$GP" + GPRMC) == [GPRMC]


def test_two_sentences_in_one_chunk():
    parser = RmcParser()
    data = GPRMC + b"\r\n" + GNRMC + b"\r\n"
    assert parser.decode(data) == [GPRMC, GNRMC]


def test_sentence_split_across_chunks():
    parser = RmcParser()
    assert parser.decode(GPRMC[:20]) == []
    assert parser.decode(GPRMC[20:]) == [GPRMC]


def test_feed_reports_completion_on_last_byte():
    parser = RmcParser()
    results = [parser.feed(b) for b in GPRMC]
    assert results[-1] is True
    assert not any(results[:-1])
    assert parser.sentence == GPRMC


def test_overlong_sentence_discarded_then_recovers():
    parser = RmcParser()
    data = b"$GPRMC" + b"," * 200 + GPRMC
    assert parser.decode(data) == [GPRMC]


def test_clear_drops_partial_sentence():
    parser = RmcParser()
    parser.decode(GPRMC[:30])
    parser.clear()
    assert parser.decode(GPRMC[30:]) == []
    assert parser.decode(GPRMC) == [GPRMC]


def test_feed_rejects_non_byte():
    with pytest.raises(ValueError):
        RmcParser().feed(300)


def test_synchro_reports_sentences_over_loopback():
    received = []
    done = threading.Event()

    def on_rmc(sentence):
        received.append(sentence)
        done.set()

    synchro = Synchro("loop://", BaudRate.BR9600, Parity.P_8N1, on_rmc)
    synchro.start()
    try:
        assert synchro.running
        synchro.port.write(b"noise" + GPRMC + b"\r\n")
        assert done.wait(5.0)
    finally:
        synchro.stop()
    assert received == [GPRMC]
    assert synchro.port is None
    assert not synchro.running


def test_synchro_start_twice_raises():
    synchro = Synchro("loop://")
    synchro.start()
    try:
        with pytest.raises(RuntimeError):
            synchro.start()
    finally:
        synchro.stop()
    assert not synchro.running


def test_synchro_missing_port_raises():
    synchro = Synchro("/nonexistent/device/ttyNONE")
    with pytest.raises(serial.SerialException):
        synchro.start()
    assert not synchro.running