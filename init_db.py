"""Create the users and posts tables on the configured database"""
from config import load_settings
from database import create_db_engine, init_models
from logger import setup_logger


def main():
    settings = load_settings()
    logger = setup_logger(settings.log_level, settings.log_file or None)
    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)

    logger.info("Creating tables on the database...")
    init_models(engine)
    logger.info("Tables created successfully!")


if __name__ == "__main__":
    main()
