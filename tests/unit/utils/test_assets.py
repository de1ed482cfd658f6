from decimal import Decimal

import pytest

from udao_mining.utils.assets import MAX_AMOUNT, Asset, Symbol, to_asset, to_symbol
from udao_mining.utils.exceptions import LedgerErrorCodes, LedgerException

UDAO = Symbol("UDAO", 8)


class TestSymbol:
    def test_parse(self):
        symbol = Symbol.parse("8,UDAO")
        assert symbol == UDAO
        assert symbol.scale == 100000000
        assert str(symbol) == "8,UDAO"

    @pytest.mark.parametrize("text", ["UDAO", "8,udao", "x,UDAO", "19,UDAO", "8,TOOLONGX", "8,"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(LedgerException) as exc:
            Symbol.parse(text)
        assert exc.value.error_code == LedgerErrorCodes.INVALID_AMOUNT

    def test_to_symbol_passthrough(self):
        assert to_symbol(UDAO) is UDAO


class TestAssetParsing:
    def test_parse_uses_fraction_digits_as_precision(self):
        asset = Asset.parse("1.00000000 UDAO")
        assert asset.amount == 100000000
        assert asset.symbol == UDAO

    def test_parse_integer_asset(self):
        asset = Asset.parse("42 EOS")
        assert asset.amount == 42
        assert asset.symbol == Symbol("EOS", 0)

    def test_parse_negative(self):
        assert Asset.parse("-0.5000 EOS").amount == -5000

    @pytest.mark.parametrize("text", ["1.0 udao", "1.0", "abc UDAO", "1.0  UDAO", "", "1e5 UDAO"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(LedgerException) as exc:
            Asset.parse(text)
        assert exc.value.error_code == LedgerErrorCodes.INVALID_AMOUNT

    def test_parse_rejects_out_of_range(self):
        with pytest.raises(LedgerException) as exc:
            Asset.parse(f"{MAX_AMOUNT + 1} BIG")
        assert exc.value.error_code == LedgerErrorCodes.INVALID_AMOUNT

    def test_format(self):
        assert str(Asset(5000000000, UDAO)) == "50.00000000 UDAO"
        assert str(Asset(596, UDAO)) == "0.00000596 UDAO"
        assert str(Asset(-5, Symbol("EOS", 4))) == "-0.0005 EOS"
        assert str(Asset(7, Symbol("EOS", 0))) == "7 EOS"

    def test_to_decimal_is_exact(self):
        assert Asset.parse("20999999.99999999 UDAO").to_decimal() == Decimal("20999999.99999999")

    def test_to_asset_accepts_strings(self):
        assert to_asset("2.00000000 UDAO") == Asset(200000000, UDAO)


class TestAssetArithmetic:
    def test_add_and_subtract(self):
        a = Asset(150, UDAO)
        b = Asset(50, UDAO)
        assert a + b == Asset(200, UDAO)
        assert a - b == Asset(100, UDAO)

    def test_mismatched_symbols_rejected(self):
        with pytest.raises(LedgerException) as exc:
            Asset(1, UDAO) + Asset(1, Symbol("UDAO", 4))
        assert exc.value.error_code == LedgerErrorCodes.SYMBOL_MISMATCH

    def test_multiply_by_tranche_count(self):
        assert Asset(5000000000, UDAO) * 3 == Asset(15000000000, UDAO)
        assert 3 * Asset(2, UDAO) == Asset(6, UDAO)

    def test_multiply_overflow_rejected(self):
        with pytest.raises(LedgerException) as exc:
            Asset(MAX_AMOUNT, UDAO) * 2
        assert exc.value.error_code == LedgerErrorCodes.INVALID_AMOUNT

    def test_floor_division_truncates(self):
        assert Asset(15000000000, UDAO) // 40000 == Asset(375000, UDAO)
        assert Asset(39999, UDAO) // 40000 == Asset(0, UDAO)
        assert Asset(-7, UDAO) // 2 == Asset(-3, UDAO)

    def test_divide_by_zero(self):
        with pytest.raises(LedgerException):
            Asset(1, UDAO) // 0

    def test_comparison(self):
        assert Asset(1, UDAO) < Asset(2, UDAO)
        assert Asset(2, UDAO) <= Asset(2, UDAO)
