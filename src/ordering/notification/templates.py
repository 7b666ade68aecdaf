"""Customer email templates for order lifecycle notifications.

Each template renders ``{"subject", "body"}`` from the event's context;
``wrap_html`` turns the plain body into the branded HTML alternative.
"""

import html
import os


def _money(value) -> str:
    return f"${float(value or 0):.2f}"


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        lines = "\n".join(
            f"- {item['name']} x {item['quantity']}: {_money(item['price'] * item['quantity'])}"
            for item in context.get("items", [])
        )
        return {
            "subject": f"Order Confirmation - {order_number}",
            "body": (
                f"Hi {context.get('customer_name', 'there')},\n\n"
                f"Thank you for your order #{order_number}.\n\n"
                f"{lines}\n\n"
                f"Items: {_money(context.get('items_price'))}\n"
                f"Tax: {_money(context.get('tax_price'))}\n"
                f"Shipping: {_money(context.get('shipping_price'))}\n"
                f"Discount: -{_money(context.get('discount_amount'))}\n"
                f"Total: {_money(context.get('total_price'))}\n\n"
                "We'll let you know when your order ships."
            ),
        }


class StatusUpdateTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        body = f"Your order status is now: {context.get('status')}."
        if context.get("tracking_number"):
            body += f"\nCarrier: {context.get('carrier')}\nTracking Number: {context['tracking_number']}"
        if context.get("estimated_delivery"):
            body += f"\nEstimated Delivery: {context['estimated_delivery']}"
        if context.get("note"):
            body += f"\nNote: {context['note']}"
        return {"subject": f"Order Status Updated - {order_number}", "body": body}


class OrderCancellationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": f"Order Cancelled - {context.get('order_number', 'N/A')}",
            "body": "Your order has been cancelled. If you have questions, please contact support.",
        }


class RefundTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": f"Refund Processed - {context.get('order_number', 'N/A')}",
            "body": (
                f"A refund of {_money(context.get('amount'))} for order "
                f"#{context.get('order_number', 'N/A')} has been issued.\n\n"
                "It may take 5-10 business days to appear on your statement."
            ),
        }


def wrap_html(subject: str, body: str) -> str:
    sender = html.escape(os.environ.get("FROM_NAME", "Storefront"))
    content = html.escape(body).replace("\n", "<br/>")
    return (
        '<div style="font-family: Arial, sans-serif; background: #f7fafc; padding: 32px;">'
        '<div style="max-width: 600px; margin: 0 auto; background: #fff;">'
        f'<h1 style="background: #facc15; margin: 0; padding: 24px;">{sender}</h1>'
        f'<div style="padding: 32px;"><h2>{html.escape(subject)}</h2><hr>{content}</div>'
        "</div></div>"
    )
