import sys

from dotenv import load_dotenv

from auth.deps import create_access_token

# .env 読み込み
load_dotenv()

# 引数でユーザーIDを渡す（省略時は固定の開発用ID）
USER_ID = sys.argv[1] if len(sys.argv) > 1 else "dev-user"

print(create_access_token(USER_ID))
