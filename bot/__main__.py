"""
Bot 진입점 (일일 정산 스케줄러 + 잔고 감시자)

실행 방법:
    python -m bot
"""

import asyncio

from bot.bootstrap import main

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
