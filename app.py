import logging
import os

from renttracker import create_app

app = create_app()


# -------------------------------------
# Run App
# -------------------------------------
if __name__ == "__main__":
    port = int(os.getenv("PORT", 3000))
    logging.info("Rent tracker starting on port %s...", port)
    app.run(host="0.0.0.0", port=port)
