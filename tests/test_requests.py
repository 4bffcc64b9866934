"""Tests for request builders."""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from lxml import etree

from bluem_sdk import (
    ConfigurationError,
    EMandateStatusRequest,
    EMandateTransactionRequest,
    IBANNameCheckRequest,
    IdentityStatusRequest,
    IdentityTransactionRequest,
    PaymentStatusRequest,
    PaymentTransactionRequest,
    XmlSchemaValidator,
    get_identity_request_types,
    load_config,
)
from bluem_sdk.constants import STATIC_MERCHANT_ID
from bluem_sdk.requests import format_amount


def _root(request):
    return etree.fromstring(request.xml())


@pytest.fixture
def mandate_request(config, fixed_now):
    return EMandateTransactionRequest(config, customer_id="1234", order_id="5678", now=fixed_now)


@pytest.fixture
def payment_request(config, fixed_now):
    return PaymentTransactionRequest(
        config,
        description="Order 5678",
        debtor_reference="customer-42",
        amount="10",
        now=fixed_now,
    )


class TestEnvelope:
    """Tests for the interface element shared by every request."""

    def test_interface_attributes(self, mandate_request):
        """Should carry the fixed envelope attributes."""
        root = _root(mandate_request)

        assert root.tag == "EMandateInterface"
        assert root.get("type") == "TransactionRequest"
        assert root.get("mode") == "direct"
        assert root.get("senderID") == "S1212"
        assert root.get("version") == "1.0"
        assert root.get("messageCount") == "1"

    def test_create_date_time_in_amsterdam(self, mandate_request):
        assert _root(mandate_request).get("createDateTime") == "2024-03-15T11:30:45.000Z"

    def test_entrance_code_generated(self, mandate_request):
        """Should generate the entrance code from the creation time."""
        request_object = _root(mandate_request)[0]

        assert request_object.get("entranceCode") == "20240315103045123"

    def test_status_request_type(self, config):
        root = _root(EMandateStatusRequest(config, "1234202403155678", entrance_code="abc"))

        assert root.get("type") == "StatusRequest"
        assert root[0].tag == "EMandateStatusRequest"
        assert root[0].get("entranceCode") == "abc"

    def test_xml_declaration(self, mandate_request):
        assert mandate_request.xml().startswith(b"<?xml version='1.0' encoding='UTF-8'?>")

    def test_rendered_once(self, mandate_request):
        """Should return the same document on every call."""
        assert mandate_request.xml() is mandate_request.xml()


class TestExpectedReturn:
    """Tests for the test environment expectedReturn attribute."""

    def test_absent_by_default(self, mandate_request):
        assert _root(mandate_request)[0].get("expectedReturn") is None

    def test_configured_status(self, config_data, fixed_now):
        config_data["expectedReturnStatus"] = "cancelled"
        config = load_config(config_data)

        request = PaymentStatusRequest(config, "xyz", now=fixed_now)

        assert _root(request)[0].get("expectedReturn") == "cancelled"

    def test_unknown_override_becomes_success(self, config):
        request = PaymentStatusRequest(config, "xyz", expected_return="bogus")

        assert _root(request)[0].get("expectedReturn") == "success"

    def test_never_sent_outside_test(self, prod_config):
        """Should drop expectedReturn in production."""
        request = PaymentStatusRequest(prod_config, "xyz", expected_return="success")

        assert _root(request)[0].get("expectedReturn") is None


class TestRequestUrl:
    """Tests for submission URLs."""

    def test_request_path(self, mandate_request):
        assert mandate_request.request_path == "mr/TRX"

    @pytest.mark.parametrize(
        "request_class,args,path",
        [
            (EMandateStatusRequest, ("m1",), "mr/SRX"),
            (PaymentStatusRequest, ("t1",), "pr/PSX"),
            (IdentityStatusRequest, ("t1",), "ir/ISX"),
            (IBANNameCheckRequest, ("NL91ABNA0417164300", "J. Jansen"), "icr/INX"),
        ],
    )
    def test_paths_per_family(self, config, request_class, args, path):
        assert request_class(config, *args).request_path == path

    def test_request_url_carries_token(self, mandate_request, test_token):
        assert mandate_request.request_url == (
            f"https://test.viamijnbank.net/mr/TRX?token={test_token}"
        )

    def test_production_host(self, prod_config, production_token):
        request = PaymentStatusRequest(prod_config, "xyz")

        assert request.request_url == (
            f"https://viamijnbank.net/pr/PSX?token={production_token}"
        )


class TestSchemaConformance:
    """Every builder should produce a document its schema accepts."""

    def test_all_builders_validate(self, config, fixed_now):
        requests = [
            EMandateTransactionRequest(
                config,
                "1234",
                "5678",
                debtor_wallet_bic="INGBNL2A",
                additional_data={"EmailAddress": "j@example.com"},
                now=fixed_now,
            ),
            EMandateStatusRequest(config, "1234202403155678", now=fixed_now),
            PaymentTransactionRequest(
                config,
                "Order 5678",
                "customer-42",
                Decimal("12.5"),
                debtor_wallet_bic="BUNQNL2A",
                now=fixed_now,
            ),
            PaymentStatusRequest(config, "xyz", now=fixed_now),
            IdentityTransactionRequest(
                config,
                ["NameRequest", "AgeCheckRequest"],
                "Verify your identity",
                "customer-42",
                debtor_wallet_bic="RABONL2U",
                now=fixed_now,
            ),
            IdentityStatusRequest(config, "idn1", now=fixed_now),
            IBANNameCheckRequest(config, "nl91 abna 0417 1643 00", "J. Jansen", "customer-42"),
        ]

        for request in requests:
            validator = XmlSchemaValidator()
            assert validator.validate(request.context, request.xml()), validator.error_details

    def test_production_mandate_validates(self, prod_config, fixed_now):
        request = EMandateTransactionRequest(prod_config, "1234", "5678", now=fixed_now)

        assert XmlSchemaValidator().validate(request.context, request.xml())


class TestMandateRequest:
    """Tests for EMandateTransactionRequest."""

    def test_attributes(self, mandate_request):
        request_object = _root(mandate_request)[0]

        assert request_object.get("requestType") == "Issuing"
        assert request_object.get("localInstrumentCode") == "CORE"
        assert request_object.get("merchantID") == STATIC_MERCHANT_ID
        assert request_object.get("merchantSubID") == "0"
        assert request_object.get("language") == "nl"
        assert request_object.get("sendOption") == "none"

    def test_body(self, mandate_request):
        """Should fill the mandate body in the provider's order."""
        request_object = _root(mandate_request)[0]

        assert [child.tag for child in request_object] == [
            "MandateID",
            "MerchantReturnURL",
            "SequenceType",
            "EMandateReason",
            "DebtorReference",
            "PurchaseID",
        ]
        assert request_object.findtext("MandateID") == "1234202403155678"
        assert request_object.findtext("SequenceType") == "RCUR"
        assert request_object.findtext("DebtorReference") == "1234"
        assert request_object.findtext("PurchaseID") == "1234-5678"

    def test_derived_return_url(self, mandate_request):
        """Should point the return URL at the configured base."""
        url = _root(mandate_request)[0].find("MerchantReturnURL")

        assert url.text == "https://example.com/return?mandateID=1234202403155678"
        assert url.get("automaticRedirect") == "1"

    def test_explicit_mandate_id(self, config):
        request = EMandateTransactionRequest(config, "1234", "5678", mandate_id="M1")

        assert _root(request)[0].findtext("MandateID") == "M1"

    def test_missing_return_base(self, config_data):
        """Should refuse to guess a return URL."""
        del config_data["merchantReturnURLBase"]
        config = load_config(config_data)

        with pytest.raises(ConfigurationError):
            EMandateTransactionRequest(config, "1234", "5678")

    def test_empty_ids(self, config):
        with pytest.raises(ValueError):
            EMandateTransactionRequest(config, "", "5678")
        with pytest.raises(ValueError):
            EMandateTransactionRequest(config, "1234", "")

    def test_b2b_instrument(self, config_data):
        config_data["localInstrumentCode"] = "B2B"
        request = EMandateTransactionRequest(load_config(config_data), "1234", "5678")

        assert _root(request)[0].get("localInstrumentCode") == "B2B"
        with pytest.raises(ValueError):
            request.select_debtor_wallet("KNABNL2H")


class TestDebtorWallet:
    """Tests for bank preselection."""

    def test_wallet_element(self, config):
        request = EMandateTransactionRequest(config, "1234", "5678", debtor_wallet_bic="INGBNL2A")

        wallet = _root(request)[0].find("DebtorWallet")

        assert wallet.findtext("INCASSOMACHTIGEN/BIC") == "INGBNL2A"

    def test_payment_wallet_element(self, payment_request):
        payment_request.select_debtor_wallet("ABNANL2A")

        assert _root(payment_request)[0].findtext("DebtorWallet/IDEAL/BIC") == "ABNANL2A"

    def test_unknown_bic(self, payment_request):
        """Should reject banks outside the family list."""
        with pytest.raises(ValueError) as exc_info:
            payment_request.select_debtor_wallet("XXXXNL2A")

        assert "XXXXNL2A" in str(exc_info.value)

    def test_iban_check_has_no_wallet(self, config):
        request = IBANNameCheckRequest(config, "NL91ABNA0417164300", "J. Jansen")

        with pytest.raises(ValueError):
            request.select_debtor_wallet("INGBNL2A")

    def test_frozen_after_render(self, payment_request):
        """Should not allow changes once the document has been rendered."""
        payment_request.xml()

        with pytest.raises(RuntimeError):
            payment_request.select_debtor_wallet("ABNANL2A")


class TestAdditionalData:
    """Tests for DebtorAdditionalData."""

    def test_provider_key_order(self, payment_request):
        payment_request.add_additional_data("CustomerName", "J. Jansen")
        payment_request.add_additional_data("EmailAddress", "j@example.com")

        data = _root(payment_request)[0].find("DebtorAdditionalData")

        assert [child.tag for child in data] == ["EmailAddress", "CustomerName"]

    def test_unknown_key(self, payment_request):
        with pytest.raises(ValueError):
            payment_request.add_additional_data("FavouriteColour", "blue")

    def test_placed_before_wallet(self, config):
        request = PaymentTransactionRequest(
            config,
            "Order",
            "customer-42",
            5,
            debtor_wallet_bic="INGBNL2A",
            additional_data={"TelephoneNumber": "0612345678"},
        )

        tags = [child.tag for child in _root(request)[0]]

        assert tags[-2:] == ["DebtorAdditionalData", "DebtorWallet"]


class TestPaymentRequest:
    """Tests for PaymentTransactionRequest."""

    def test_attributes(self, payment_request):
        request_object = _root(payment_request)[0]

        assert request_object.get("documentType") == "PayRequest"
        assert request_object.get("brandID") == "ExampleBrand"

    def test_body(self, payment_request):
        request_object = _root(payment_request)[0]

        assert request_object.findtext("PaymentReference") == "customer-4220240315"
        assert request_object.findtext("Currency") == "EUR"
        assert request_object.findtext("Amount") == "10.00"

    def test_due_date_defaults_to_next_day(self, payment_request):
        assert _root(payment_request)[0].findtext("DueDateTime") == "2024-03-16T11:30:45.000Z"

    def test_explicit_due_date(self, config, fixed_now):
        due = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc)
        request = PaymentTransactionRequest(config, "Order", "ref", 1, due_date_time=due, now=fixed_now)

        # April is summer time in Amsterdam
        assert _root(request)[0].findtext("DueDateTime") == "2024-04-01T14:00:00.000Z"

    def test_return_url_uses_entrance_code(self, config):
        request = PaymentTransactionRequest(config, "Order", "ref", 1, entrance_code="abc123")

        assert _root(request)[0].findtext("DebtorReturnURL") == (
            "https://example.com/return?entranceCode=abc123"
        )

    @pytest.mark.parametrize("amount", [0, -1, "0.00"])
    def test_non_positive_amount(self, config, amount):
        with pytest.raises(ValueError):
            PaymentTransactionRequest(config, "Order", "ref", amount)

    @pytest.mark.parametrize(
        "amount,expected",
        [(10, "10.00"), ("9.5", "9.50"), (Decimal("0.005"), "0.01"), (1.1, "1.10")],
    )
    def test_format_amount(self, amount, expected):
        assert format_amount(amount) == expected


class TestIdentityRequest:
    """Tests for IdentityTransactionRequest."""

    def test_categories_in_fixed_order(self, config):
        request = IdentityTransactionRequest(
            config, ["AgeCheckRequest", "NameRequest"], "Verify", "customer-42"
        )

        categories = _root(request)[0].find("RequestCategory")

        assert [child.tag for child in categories] == ["NameRequest", "AgeCheckRequest"]
        assert all(child.get("action") == "request" for child in categories)

    def test_single_category(self, config):
        request = IdentityTransactionRequest(config, "CustomerIDRequest", "Verify", "ref")

        assert _root(request)[0].find("RequestCategory/CustomerIDRequest") is not None

    def test_unknown_category(self, config):
        with pytest.raises(ValueError) as exc_info:
            IdentityTransactionRequest(config, ["ShoeSizeRequest"], "Verify", "ref")

        assert "ShoeSizeRequest" in str(exc_info.value)

    def test_identity_brand_override(self, config_data):
        """Should prefer the identity brand when configured."""
        config_data["IDINBrandID"] = "ExampleIdentity"
        request = IdentityTransactionRequest(load_config(config_data), "NameRequest", "Verify", "ref")

        assert _root(request)[0].get("brandID") == "ExampleIdentity"

    def test_request_types(self):
        types = get_identity_request_types()

        assert len(types) == 9
        assert types[0] == "CustomerIDRequest"


class TestIBANNameCheckRequest:
    """Tests for IBANNameCheckRequest."""

    def test_normalizes_iban(self, config):
        request = IBANNameCheckRequest(config, "nl91 abna 0417 1643 00", "J. Jansen")

        assert _root(request)[0].findtext("IBAN") == "NL91ABNA0417164300"

    def test_optional_debtor_reference(self, config):
        request = IBANNameCheckRequest(config, "NL91ABNA0417164300", "J. Jansen")

        assert _root(request)[0].find("DebtorReference") is None

    def test_missing_name(self, config):
        with pytest.raises(ValueError):
            IBANNameCheckRequest(config, "NL91ABNA0417164300", "")
