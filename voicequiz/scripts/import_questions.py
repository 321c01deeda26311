import json
import asyncio
import logging
import sys
from pathlib import Path
from voicequiz.database import AsyncSessionLocal, init_db
from voicequiz.errors import ValidationError
from voicequiz.services import store

logger = logging.getLogger(__name__)

# Каталог с .json файлами: каждый файл - список вопросов
QUESTIONS_DIR = Path("datasets/questions")

async def import_questions(directory: Path = QUESTIONS_DIR) -> int:
    if not directory.exists():
        logger.warning(f"Directory {directory} not found.")
        return 0

    files = sorted(directory.glob("*.json"))
    if not files:
        logger.warning(f"No .json files found in {directory}!")
        return 0

    await init_db()
    total_imported = 0

    async with AsyncSessionLocal() as session:
        for file_path in files:
            logger.info(f"Processing {file_path.name}...")

            try:
                data = json.loads(file_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.error(f"Error parsing {file_path}: {e}")
                continue

            count = 0
            for item in data:
                try:
                    await store.create_question(
                        session,
                        text=item.get("text"),
                        description=item.get("description"),
                        media_files=item.get("media_files", []),
                        correct_answer=item.get("correct_answer"),
                        show_spectrum=1 if item.get("show_spectrum") in (True, "true", 1) else 0,
                        order_number=item.get("order_number"),
                    )
                except ValidationError as e:
                    logger.warning(f"Skipping item in {file_path.name}: {e.message}")
                    continue
                count += 1

            logger.info(f"-> Imported {count} questions from {file_path.name}.")
            total_imported += count

    logger.info(f"DONE! Total questions imported: {total_imported}")
    return total_imported

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else QUESTIONS_DIR
    asyncio.run(import_questions(target))
