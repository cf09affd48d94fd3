"""
                Tableside Ordering

Dine-in ordering backend: guests scan the QR code on their table,
browse the menu, place orders and call staff from their phone.
"""

__version__ = "1.0.0"
