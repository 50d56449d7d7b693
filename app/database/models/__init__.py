from app.database.models.borrower_model import Borrower
from app.database.models.product_model import Lender, Product

__all__ = ["Borrower", "Lender", "Product"]
