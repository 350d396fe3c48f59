"""
数据帧处理器测试
================

测试 VEDirectParser 的流式切帧、校验与解码，以及 decode_frame / encode_frame。
"""

import random
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vedirect_logger.core.checksum import calculate_checksum
from vedirect_logger.core.frame_handler import (
    VEDirectParser,
    decode_frame,
    encode_frame,
)
from vedirect_logger.config.constants import MAX_BUFFER_SIZE


def build_frame(lines):
    """按 KEY\\tVALUE\\r\\n 拼接数据行，并追加使总和为0的校验行"""
    body = b"".join(line + b"\r\n" for line in lines) + b"Checksum\t"
    checksum_byte = (256 - calculate_checksum(body + b"\r\n")) % 256
    return body + bytes([checksum_byte]) + b"\r\n"


def random_vedirect_fields(rng):
    """生成一组随机的 MPPT 控制器字段"""
    load_state = "ON" if rng.random() > 0.5 else "OFF"
    digits = "0123456789"
    letters = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
    return {
        "PID": rng.choice(["0xA07D", "0xA053", "0xA06C", "0xA389"]),
        "FW": str(rng.randint(100, 450)),
        "SER#": "HQ" + "".join(rng.choice(digits) for _ in range(6))
        + "".join(rng.choice(letters) for _ in range(3)),
        "V": str(rng.randint(12000, 58000)),
        "I": str(rng.randint(-45000, 55000)),
        "VPV": str(rng.randint(0, 75000)),
        "PPV": str(rng.randint(0, 1200)),
        "CS": str(rng.randint(0, 9)),
        "MPPT": str(rng.randint(0, 2)),
        "OR": "0x" + "".join(rng.choice("01") for _ in range(8)),
        "ERR": str(rng.choice([0, 0, 0, 0, 0, 2, 17, 18, 20, 26, 33])),
        "LOAD": load_state,
        "IL": str(rng.randint(0, 20000)) if load_state == "ON" else "0",
        "H19": str(rng.randint(0, 99999)),
        "H20": str(rng.randint(0, 500)),
        "H21": str(rng.randint(0, 1200)),
        "H22": str(rng.randint(0, 500)),
        "H23": str(rng.randint(0, 1200)),
        "HSDS": str(rng.randint(0, 365)),
    }


RANDOM_FIELDS = [random_vedirect_fields(random.Random(seed)) for seed in range(10)]


@pytest.fixture
def parser():
    return VEDirectParser()


class TestVEDirectParser:
    """流式解析器测试类"""

    def test_concrete_frame(self, parser):
        """V/I 两个字段的帧解析为对应记录"""
        frame = build_frame([b"V\t12800", b"I\t-500"])

        records = parser.process(frame)

        assert records == [{"V": "12800", "I": "-500"}]
        assert parser.buffered == 0

    @pytest.mark.parametrize("fields", RANDOM_FIELDS)
    def test_roundtrip_single_call(self, parser, fields):
        """随机字段编码后一次送入，得到与原字段相等的一条记录"""
        records = parser.process(encode_frame(fields))

        assert len(records) == 1
        assert records[0] == fields

    def test_fragmentation_every_split_point(self):
        """在任意位置把帧切成两段，结果与整体送入相同"""
        frame = encode_frame(RANDOM_FIELDS[0])

        for split in range(1, len(frame)):
            parser = VEDirectParser()
            assert parser.process(frame[:split]) == []
            assert parser.process(frame[split:]) == [RANDOM_FIELDS[0]]

    def test_fragmentation_byte_by_byte(self, parser):
        """逐字节送入，只有最后一个字节产出记录"""
        frame = build_frame([b"V\t12800", b"I\t-500"])

        for i in range(len(frame) - 1):
            assert parser.process(frame[i:i + 1]) == []

        assert parser.process(frame[-1:]) == [{"V": "12800", "I": "-500"}]

    def test_multiple_frames_in_one_chunk(self, parser):
        """多帧拼接后一次送入，按原顺序得到多条记录"""
        data = b"".join(encode_frame(fields) for fields in RANDOM_FIELDS[:5])

        records = parser.process(data)

        assert records == RANDOM_FIELDS[:5]

    def test_trailing_partial_frame_is_kept(self, parser):
        """完整帧之后的半帧保留到下一次调用"""
        first = encode_frame({"V": "12800"})
        second = encode_frame({"V": "13000"})

        assert parser.process(first + second[:10]) == [{"V": "12800"}]
        assert parser.buffered == 10
        assert parser.process(second[10:]) == [{"V": "13000"}]

    def test_marker_without_terminator_is_retained(self, parser):
        """已收到校验标签但行尾未到达时不消费任何数据"""
        partial = b"V\t12800\r\nChecksum\t"

        assert parser.process(partial) == []
        assert parser.buffered == len(partial)

    def test_terminator_before_marker_is_not_used(self, parser):
        """校验标签之前的 \\r\\n 不能作为帧结束"""
        partial = b"V\t12800\r\nI\t-500\r\nChecksum\t"

        assert parser.process(partial) == []
        assert parser.buffered == len(partial)

    def test_corrupted_frame_dropped_and_next_frame_parsed(self, parser):
        """校验失败的帧被静默丢弃，后续有效帧照常解析"""
        bad = bytearray(build_frame([b"V\t12800", b"I\t-500"]))
        bad[2] = ord("2")  # '1' -> '2'
        good = build_frame([b"V\t13000"])

        records = parser.process(bytes(bad) + good)

        assert records == [{"V": "13000"}]
        assert parser.stats.frames_invalid == 1
        assert parser.stats.frames_valid == 1

    @pytest.mark.parametrize("position", [0, 5, 10, 20])
    def test_single_byte_flip_rejected(self, parser, position):
        """翻转任意单个字节的帧不产出记录"""
        frame = bytearray(encode_frame({"V": "12800", "I": "-500", "PPV": "120"}))
        frame[position] ^= 0x01

        assert parser.process(bytes(frame)) == []

    def test_leading_garbage_discarded_with_frame(self, parser):
        """帧前的噪声与该帧一起被切出，校验失败后丢弃，下一帧正常解析"""
        garbage = b"\x00\x13noise"
        first = encode_frame({"V": "12800"})
        second = encode_frame({"V": "13000"})

        records = parser.process(garbage + first + second)

        assert records == [{"V": "13000"}]

    def test_overflow_resets_buffer(self, parser):
        """超过上限且没有校验标签时清空缓冲区，随后的有效帧仍能解析"""
        noise = b"x" * (MAX_BUFFER_SIZE + 1)

        assert parser.process(noise) == []
        assert parser.buffered == 0
        assert parser.stats.buffer_resets == 1

        assert parser.process(build_frame([b"V\t12800"])) == [{"V": "12800"}]

    def test_buffer_at_limit_is_kept(self, parser):
        """恰好等于上限时不清空"""
        parser.process(b"x" * MAX_BUFFER_SIZE)

        assert parser.buffered == MAX_BUFFER_SIZE
        assert parser.stats.buffer_resets == 0

    def test_overflow_while_waiting_for_terminator(self):
        """校验标签后迟迟没有行尾，同样受上限保护"""
        parser = VEDirectParser(max_buffer_size=32)

        parser.process(b"Checksum\t" + b"y" * 40)

        assert parser.buffered == 0
        assert parser.process(build_frame([b"V\t1"])) == [{"V": "1"}]

    def test_custom_max_buffer_size(self):
        """上限可配置"""
        parser = VEDirectParser(max_buffer_size=16)

        parser.process(b"z" * 16)
        assert parser.buffered == 16
        parser.process(b"z")
        assert parser.buffered == 0

    def test_invalid_max_buffer_size(self):
        """上限必须大于0"""
        with pytest.raises(ValueError):
            VEDirectParser(max_buffer_size=0)

    def test_checksum_only_frame_yields_no_record(self, parser):
        """只有校验行的帧不产出空记录"""
        frame = build_frame([])

        assert parser.process(frame) == []
        assert parser.stats.frames_empty == 1

    def test_empty_chunk(self, parser):
        """空数据块返回空列表"""
        assert parser.process(b"") == []

    def test_decode_error_keeps_partial_record(self, parser):
        """校验通过但含非ASCII字节的帧：保留出错行之前的字段"""
        frame = build_frame([b"V\t12800", b"PID\t\xff\xfe", b"I\t-500"])

        records = parser.process(frame)

        assert records == [{"V": "12800"}]
        assert parser.stats.decode_errors == 1

    def test_decode_error_on_first_line_yields_nothing(self, parser):
        """出错行之前没有字段时不产出记录，解析器仍可继续工作"""
        frame = build_frame([b"\xffV\t12800"])

        assert parser.process(frame) == []
        assert parser.process(build_frame([b"V\t1"])) == [{"V": "1"}]

    def test_process_uses_decode_frame(self, parser):
        """校验通过的帧交给 decode_frame 解码"""
        frame = build_frame([b"V\t12800"])

        with patch(
            "vedirect_logger.core.frame_handler.decode_frame", wraps=decode_frame
        ) as mock_decode:
            assert parser.process(frame) == [{"V": "12800"}]

        assert mock_decode.call_args[0][0] == frame

    def test_reset_clears_buffer(self, parser):
        """reset 清空缓冲区"""
        parser.process(b"V\t128")
        parser.reset()

        assert parser.buffered == 0

    def test_statistics_bytes_received(self, parser):
        """统计接收字节数"""
        frame = build_frame([b"V\t12800"])
        parser.process(frame[:4])
        parser.process(frame[4:])

        stats = parser.stats.to_dict()
        assert stats["bytes_received"] == len(frame)
        assert stats["frames_valid"] == 1


class TestDecodeFrame:
    """帧解码函数测试类"""

    def test_decode_basic(self):
        """普通键值行"""
        assert decode_frame(b"V\t12800\r\nI\t-500\r\n") == {"V": "12800", "I": "-500"}

    def test_skip_checksum_and_hex_lines(self):
        """跳过校验行和异步HEX消息行"""
        frame = b"V\t12800\r\n:A0102000543\r\nChecksum\t\x9a\r\n"

        assert decode_frame(frame) == {"V": "12800"}

    def test_extra_tabs_belong_to_value(self):
        """值中的制表符原样保留"""
        assert decode_frame(b"SER#\tHQ\t1234\t5\r\n") == {"SER#": "HQ\t1234\t5"}

    def test_empty_value_kept_empty_key_ignored(self):
        """空值保留为空字符串，空键的行被忽略"""
        frame = b"LOAD\t\r\n\tORPHAN\r\nERR\r\n"

        assert decode_frame(frame) == {"LOAD": "", "ERR": ""}

    def test_duplicate_key_last_wins(self):
        """重复键取最后一次出现的值"""
        assert decode_frame(b"V\t1\r\nV\t2\r\n") == {"V": "2"}

    def test_non_ascii_returns_partial(self):
        """非ASCII行之前的字段被保留"""
        assert decode_frame(b"V\t1\r\nX\t\xe9\r\nI\t2\r\n") == {"V": "1"}

    def test_non_ascii_calls_on_error(self):
        """解码失败时调用 on_error 回调"""
        errors = []

        record = decode_frame(b"V\t1\r\nX\t\xe9\r\n", on_error=errors.append)

        assert record == {"V": "1"}
        assert len(errors) == 1
        assert isinstance(errors[0], UnicodeDecodeError)

    def test_on_error_not_called_for_valid_frame(self):
        errors = []

        decode_frame(b"V\t1\r\n", on_error=errors.append)

        assert errors == []

    def test_empty_frame(self):
        """空帧解码为空记录"""
        assert decode_frame(b"") == {}


class TestEncodeFrame:
    """帧编码测试类"""

    def test_encoded_frame_sums_to_zero(self):
        """编码后的帧总和为0且以校验行结尾"""
        frame = encode_frame({"V": "12800", "I": "-500"})

        assert calculate_checksum(frame) == 0
        assert frame.startswith(b"V\t12800\r\nI\t-500\r\nChecksum\t")
        assert frame.endswith(b"\r\n")
        assert len(frame) == len(b"V\t12800\r\nI\t-500\r\nChecksum\t") + 3
