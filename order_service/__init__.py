"""
Order Service - 注文作成ワークフロー

顧客 ID と (商品, 数量) のリストを受け取り、
検証 → 価格決定・在庫チェック → 永続化 の順に処理する。

コラボレーターの実装:
  repositories.py   SQLAlchemy (main.py の HTTP サービスが使う)
  customers_http.py 顧客ディレクトリを別サービスに問い合わせる (httpx)
  memory.py         インメモリ実装 (テストやローカル実行で CreateOrderService に直接渡す)
"""
