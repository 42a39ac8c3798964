from pesxchange.database import Base, engine
from pesxchange.models import (
    user,
    category,
    item,
    item_like,
    message,
)

print("Creating database tables...")
Base.metadata.create_all(bind=engine)
print("All tables created successfully!")
