from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from deps import get_scheduler
from services.scheduler import MonitorScheduler

router = APIRouter()

@router.get("/", response_class=HTMLResponse)
def root(scheduler: MonitorScheduler = Depends(get_scheduler)):
    html = """<!DOCTYPE html>
<html lang='es'>
<head>
<meta charset='utf-8'/>
<meta name='viewport' content='width=device-width, initial-scale=1'/>
<title>Service Status Monitor</title>
<style>
body{font-family:system-ui,sans-serif;background:#0f172a;color:#e2e8f0;margin:0}
.container{max-width:1100px;margin:0 auto;padding:2rem}
.cards{display:flex;gap:12px;margin:16px 0}
.card{background:#1e293b;border-radius:10px;padding:14px 18px;flex:1}
.card h3{margin:0;font-size:.9rem;color:#94a3b8}.card p{margin:4px 0 0;font-size:1.6rem}
.ok{color:#22c55e}.err{color:#ef4444}.muted{color:#94a3b8;font-size:.85rem}
.service{background:#1e293b;border-left:4px solid #64748b;border-radius:8px;padding:12px 16px;margin-bottom:10px}
.service.up{border-color:#22c55e}.service.down{border-color:#ef4444}
.row{display:flex;gap:24px;flex-wrap:wrap;margin-top:6px}
.error{color:#fca5a5;margin-top:6px;font-size:.85rem}
button{background:#334155;color:#e2e8f0;border:0;border-radius:6px;padding:8px 14px;cursor:pointer}
</style>
</head>
<body>
<div class='container'>
<header>
<h1 style='margin:0;'>Service Status Monitor</h1>
<p class='muted'>Chequeo automático cada __INTERVAL__s · <button id='refresh'>Refrescar ahora</button> <span id='lastTs'></span></p>
</header>

<div class='cards'>
  <div class='card'><h3>Servicios</h3><p id='total'>-</p></div>
  <div class='card'><h3>UP</h3><p id='up' class='ok'>-</p></div>
  <div class='card'><h3>DOWN</h3><p id='down' class='err'>-</p></div>
</div>

<div id='list'><p class='muted'>Cargando...</p></div>
</div>

<script>
function el(tag, cls, text){
  const e=document.createElement(tag); if(cls) e.className=cls; if(text!=null) e.textContent=text; return e;
}

function render(data){
  document.getElementById('total').textContent=data.summary.total;
  document.getElementById('up').textContent=data.summary.up;
  document.getElementById('down').textContent=data.summary.down;
  if(data.ts){ document.getElementById('lastTs').textContent='Último ciclo: '+new Date(data.ts*1000).toLocaleTimeString(); }

  const list=document.getElementById('list');
  list.innerHTML='';
  if(!data.results.length){ list.appendChild(el('p','muted','Sin resultados todavía')); return; }
  for(const r of data.results){
    const c=data.counters[r.target]||{success:0,failure:0};
    const box=el('div','service '+r.status.toLowerCase());
    box.appendChild(el('div',null,(r.status==='UP'?'✓ ':'✗ ')+r.status+' · '+(r.name||r.target)));
    box.appendChild(el('div','muted',r.target));
    const row=el('div','row');
    row.appendChild(el('span',null,'Código: '+(r.status_code||'-')));
    row.appendChild(el('span',null,'Latencia: '+r.latency_seconds+'s'));
    row.appendChild(el('span',null,'Promedio: '+(data.averages[r.target]||0).toFixed(2)+'s'));
    row.appendChild(el('span',null,'Uptime: '+(data.uptime_pct[r.target]||0).toFixed(1)+'%'));
    row.appendChild(el('span',null,'Éxitos: '+c.success+' · Fallos: '+c.failure+' · Chequeos: '+(c.success+c.failure)));
    box.appendChild(row);
    if(r.error){ const e=String(r.error); box.appendChild(el('div','error','Error: '+(e.length>120? e.slice(0,120)+'…': e))); }
    list.appendChild(box);
  }
}

async function load(method){
  try{
    const r = await fetch(method==='POST' ? '/api/services/refresh' : '/api/services/status', {method: method||'GET'});
    if(!r.ok) throw new Error('status '+r.status);
    render(await r.json());
  }catch(e){ console.error(e); }
}

document.getElementById('refresh').addEventListener('click', ()=>load('POST'));
load(); setInterval(load, __POLL_MS__);
</script>
</body>
</html>"""
    interval = scheduler.interval_s
    html = html.replace("__INTERVAL__", f"{interval:g}")
    html = html.replace("__POLL_MS__", str(max(1000, int(interval * 1000))))
    return HTMLResponse(html)
