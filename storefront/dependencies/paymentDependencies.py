from storefront.crud.paymentGateway import PaymentGateway, MockPaymentGateway

_gateway = MockPaymentGateway()


def get_payment_gateway() -> PaymentGateway:
    """Gateway used by the payment routes; override in tests to force outcomes"""
    return _gateway
