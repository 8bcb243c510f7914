"""
HTML templates for the exchange rate monitor page
"""

RATE_TABLE_TEMPLATE = """
<div class="table-wrapper">
    <table class="rate-table">
        <thead>
            <tr>
                {%- for label in headers %}
                <th>{{ label }}</th>
                {%- endfor %}
            </tr>
        </thead>
        <tbody>
            {%- for rate in rates %}
            <tr class="rate-row">
                <td class="currency">{{ rate.currency }}</td>
                <td class="code">{{ rate.currency_code }}</td>
                <td class="buy">{{ rate.cash_buy }}</td>
                <td class="sell">{{ rate.cash_sell }}</td>
                <td class="buy strong">{{ rate.spot_buy }}</td>
                <td class="sell strong">{{ rate.spot_sell }}</td>
            </tr>
            {%- endfor %}
        </tbody>
    </table>
</div>
"""

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="zh-Hant">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ bank_name }}匯率監控</title>
    <style>
        * {
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Noto Sans TC', Arial, sans-serif;
            background: #f8fafc;
            min-height: 100vh;
            padding: 20px;
            color: #0f172a;
        }

        .container {
            max-width: 1100px;
            margin: 0 auto;
        }

        .header {
            display: flex;
            flex-wrap: wrap;
            justify-content: space-between;
            align-items: flex-end;
            gap: 20px;
            margin-bottom: 24px;
        }

        .header h1 {
            font-size: 30px;
            margin-bottom: 6px;
        }

        .header p {
            color: #64748b;
        }

        .btn {
            padding: 10px 20px;
            border-radius: 12px;
            border: 1px solid #e2e8f0;
            font-weight: 600;
            cursor: pointer;
            background: white;
            color: #334155;
            text-decoration: none;
            display: inline-block;
        }

        .btn:disabled, .btn.disabled {
            background: #e2e8f0;
            color: #94a3b8;
            cursor: not-allowed;
            pointer-events: none;
        }

        .btn-export {
            background: #059669;
            border-color: #059669;
            color: white;
        }

        .btn-retry {
            background: #e11d48;
            border-color: #e11d48;
            color: white;
        }

        .status-bar {
            display: flex;
            align-items: center;
            gap: 16px;
            margin-bottom: 20px;
            font-size: 12px;
            color: #94a3b8;
        }

        .status-badge {
            display: inline-flex;
            align-items: center;
            gap: 8px;
            padding: 4px 12px;
            background: white;
            border: 1px solid #e2e8f0;
            border-radius: 999px;
            color: #475569;
        }

        .dot {
            width: 8px;
            height: 8px;
            border-radius: 50%;
        }

        .status-idle .dot { background: #94a3b8; }
        .status-loading .dot { background: #fbbf24; }
        .status-error .dot { background: #f43f5e; }
        .status-online .dot { background: #10b981; }

        .error-panel {
            background: #fff1f2;
            border: 1px solid #fecdd3;
            border-radius: 16px;
            padding: 24px;
            margin-bottom: 20px;
            color: #9f1239;
        }

        .error-panel.quota {
            background: #fffbeb;
            border-color: #fde68a;
            color: #92400e;
        }

        .error-panel h3 {
            margin-bottom: 6px;
        }

        .error-panel p {
            margin-bottom: 14px;
            font-size: 14px;
        }

        .hint {
            background: rgba(255, 255, 255, 0.6);
            border-radius: 8px;
            padding: 12px;
            font-size: 12px;
            line-height: 1.6;
        }

        .table-wrapper {
            overflow-x: auto;
            background: white;
            border: 1px solid #e2e8f0;
            border-radius: 12px;
        }

        .rate-table {
            width: 100%;
            border-collapse: collapse;
            text-align: left;
        }

        .rate-table th {
            background: #f8fafc;
            padding: 14px 20px;
            font-size: 14px;
            color: #334155;
            border-bottom: 1px solid #e2e8f0;
        }

        .rate-table td {
            padding: 14px 20px;
            font-size: 14px;
            border-bottom: 1px solid #f1f5f9;
        }

        .rate-table .code { font-weight: 700; }
        .rate-table .buy { color: #2563eb; }
        .rate-table .sell { color: #e11d48; }
        .rate-table .strong { font-weight: 600; }

        .placeholder {
            background: white;
            border: 1px solid #e2e8f0;
            border-radius: 16px;
            padding: 80px 20px;
            text-align: center;
            color: #64748b;
            font-style: italic;
        }

        .meta {
            margin-top: 12px;
            font-size: 13px;
            color: #64748b;
        }

        .citations {
            margin-top: 16px;
            font-size: 13px;
        }

        .citations ul {
            margin-top: 6px;
            padding-left: 20px;
        }

        .citations a, footer a {
            color: #2563eb;
        }

        footer {
            margin-top: 48px;
            text-align: center;
            color: #94a3b8;
            font-size: 13px;
            line-height: 1.8;
        }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <div>
                <h1>{{ bank_name }}匯率監控</h1>
                <p>即時抓取{{ bank_name }}官方數據，並支援一鍵匯出 Excel</p>
            </div>
            <div>
                <button id="btn-refresh" class="btn" onclick="refreshRates()" {% if state.is_loading %}disabled{% endif %}>
                    {{ '正在同步...' if state.is_loading else '手動更新' }}
                </button>
                <a id="btn-export" href="/export" class="btn btn-export{% if not state.has_rows %} disabled{% endif %}"
                   {% if not state.has_rows %}aria-disabled="true"{% endif %}>下載 Excel 報表</a>
            </div>
        </div>

        <div class="status-bar">
            <span class="status-badge status-{{ status_class }}"><span class="dot"></span>{{ status_label }}</span>
            {% if state.last_attempt %}
            <span>最後檢查時間: {{ state.last_attempt.strftime('%H:%M:%S') }}</span>
            {% endif %}
        </div>

        {% if state.error %}
        <div class="error-panel{% if error_kind == 'quota' %} quota{% endif %}">
            <h3>{{ '已超過 API 使用額度' if error_kind == 'quota' else '無法讀取匯率資訊' }}</h3>
            <p>{{ state.error }}</p>
            {% if error_kind == 'missing_credential' %}
            <div class="hint">
                <strong>開發提示：</strong><br>
                找不到 <code>OPENROUTER_API_KEY</code>。請在環境變數或專案根目錄的 <code>.env</code> 檔中設定後重新啟動服務。
            </div>
            {% else %}
            {% if error_kind == 'quota' %}
            <div class="hint">模型供應商暫時拒絕請求，系統會在下一次排程時自動重試，也可以稍後手動再試。</div><br>
            {% endif %}
            <button class="btn btn-retry" onclick="refreshRates()">再試一次</button>
            {% endif %}
        </div>
        {% endif %}

        {% if state.is_loading and not state.result %}
        <div class="placeholder">正在連線至{{ bank_name }}官網...</div>
        {% endif %}

        {{ rate_table|safe }}

        {% if state.result %}
        <div class="meta">掛牌時間: {{ state.result.announced_timestamp }}</div>
        {% if state.result.citations %}
        <div class="citations">
            <strong>資料來源</strong>
            <ul>
                {% for citation in state.result.citations %}
                <li><a href="{{ citation.uri }}" target="_blank" rel="noreferrer">{{ citation.title or citation.uri }}</a></li>
                {% endfor %}
            </ul>
        </div>
        {% endif %}
        {% endif %}

        <footer>
            <p>本工具自動解析 <a href="{{ source_url }}" target="_blank" rel="noreferrer">富邦官網</a> 公開數據</p>
            <p>僅供參考，實際交易匯率請依銀行櫃檯為準。</p>
        </footer>
    </div>

    <script>
        const POLL_INTERVAL_MS = {{ poll_interval_seconds * 1000 }};

        async function waitUntilSettled() {
            for (;;) {
                const response = await fetch('/api/rates');
                const data = await response.json();
                if (data.status !== 'LOADING') {
                    return;
                }
                await new Promise(resolve => setTimeout(resolve, 2000));
            }
        }

        async function refreshRates() {
            const btn = document.getElementById('btn-refresh');
            btn.disabled = true;
            btn.textContent = '正在同步...';

            try {
                await fetch('/api/rates/refresh', { method: 'POST' });
                await waitUntilSettled();
            } finally {
                window.location.reload();
            }
        }

        {% if state.is_loading %}
        waitUntilSettled().then(() => window.location.reload());
        {% endif %}

        if (POLL_INTERVAL_MS > 0) {
            setTimeout(() => window.location.reload(), POLL_INTERVAL_MS);
        }
    </script>
</body>
</html>
"""
